from flask import Blueprint, render_template, request, redirect, url_for, flash, current_app

from food_reviews.errors import StoreError
from food_reviews.models import RateLimit
from food_reviews.routes.api import get_viewer_id
from food_reviews.services import get_services
from food_reviews.services.review_filters import CUISINE_OPTIONS, FilterCriteria, filter_reviews, highest_price
from food_reviews.services.review_query import SORT_LABELS
from food_reviews.utils.user_agent import client_ip

main_bp = Blueprint('main', __name__)

CONTACT_MAX_PER_HOUR = 5
CONTACT_WINDOW_MINUTES = 60


@main_bp.route('/')
def index():
    """Home page."""
    return render_template('index.html')


@main_bp.route('/health')
def health():
    """Health check endpoint for Railway."""
    return {'status': 'healthy', 'app': 'Food Reviews'}


@main_bp.route('/login')
def login():
    return redirect(url_for('admin.login'))


# ============== REVIEWS ==============

@main_bp.route('/reviews')
def reviews():
    """All reviews, sorted server-side and filtered by the query args."""
    services = get_services()
    result = services.review_query.fetch(request.args.get('sort', 'created_at'))
    if result.error:
        flash(result.error, 'error')

    criteria = FilterCriteria.from_args(request.args)
    filtered = filter_reviews(result.reviews, criteria)

    # Also mints the viewer cookie for the like buttons
    try:
        likes = services.likes.summaries([r.id for r in filtered], get_viewer_id())
    except StoreError:
        likes = {}

    return render_template('reviews.html',
                           reviews=filtered,
                           likes=likes,
                           total=len(result.reviews),
                           sort_by=result.sort_by,
                           sort_labels=SORT_LABELS,
                           criteria=criteria,
                           cuisine_options=CUISINE_OPTIONS,
                           price_ceiling=highest_price(result.reviews))


@main_bp.route('/map')
def map_view():
    """Map of every review with coordinates."""
    result = get_services().review_query.fetch('created_at')
    if result.error:
        flash(result.error, 'error')

    markers = [{
        'id': r.id,
        'name': r.name,
        'food_eaten': r.food_eaten,
        'address': r.address,
        'latitude': r.latitude,
        'longitude': r.longitude,
        'food_rating': r.food_rating,
    } for r in result.reviews if r.has_location]

    return render_template('map.html', markers=markers)


@main_bp.route('/awards')
def awards():
    """Best-of awards and their winners."""
    try:
        awards_with_winners = get_services().awards.awards_with_winners()
    except StoreError:
        flash('Failed to load awards', 'error')
        awards_with_winners = []
    return render_template('awards.html', awards=awards_with_winners)


# ============== QR CODE ==============

@main_bp.route('/qr')
def qr_redirect():
    """Entry point printed on the QR code.

    The scan is recorded best-effort; the visitor is always sent home.
    """
    try:
        get_services().qr_scans.record(request.headers, request.remote_addr)
    except Exception as e:
        current_app.logger.error(f"QR scan handler error: {e}")
    return redirect(url_for('main.index'), code=307)


# ============== CONTACT ==============

@main_bp.route('/contact', methods=['POST'])
def contact():
    """Contact form on the home page."""
    name = request.form.get('name', '').strip()
    email = request.form.get('email', '').strip()
    subject = request.form.get('subject', '').strip()
    message = request.form.get('message', '').strip()

    if not all([name, email, subject, message]):
        flash('Please fill in every field.', 'error')
        return redirect(url_for('main.index', _anchor='contact'))

    if '@' not in email:
        flash('Please enter a valid email address.', 'error')
        return redirect(url_for('main.index', _anchor='contact'))

    ip = client_ip(request.headers, request.remote_addr)
    allowed, retry_after = RateLimit.check_rate_limit(ip, 'contact', CONTACT_MAX_PER_HOUR, CONTACT_WINDOW_MINUTES)
    if not allowed:
        minutes = max(1, retry_after // 60)
        flash(f'Too many messages. Please try again in {minutes} minutes.', 'error')
        return redirect(url_for('main.index', _anchor='contact'))

    try:
        result = get_services().email.send_contact_message(name, email, subject, message)
    except StoreError:
        flash('Failed to send message.', 'error')
        return redirect(url_for('main.index', _anchor='contact'))

    RateLimit.record_request(ip, 'contact')
    RateLimit.cleanup_old_records(older_than_minutes=CONTACT_WINDOW_MINUTES)

    if result['success']:
        flash('Message sent!', 'success')
    else:
        # Stored for the owner even when delivery failed
        flash('Thanks! Your message was received.', 'success')
    return redirect(url_for('main.index'))
