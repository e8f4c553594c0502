from functools import wraps
from flask import Blueprint, render_template, request, redirect, url_for, session, flash, current_app, abort

from food_reviews.errors import NotFoundError, StoreError, SubmissionError, ValidationError
from food_reviews.services import get_services
from food_reviews.services.review_filters import CUISINE_OPTIONS
from food_reviews.utils.coordinates import format_coordinates

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


def admin_required(f):
    """Decorator to require admin authentication."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get('admin_authenticated'):
            return redirect(url_for('admin.login', next=request.full_path))
        return f(*args, **kwargs)
    return decorated_function


def _safe_next(next_url):
    # Only allow redirects back into this site
    if next_url and next_url.startswith('/') and not next_url.startswith('//'):
        return next_url
    return url_for('admin.dashboard')


@admin_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Admin login page."""
    if request.method == 'POST':
        password = request.form.get('password', '')
        if password == current_app.config['ADMIN_PASSWORD']:
            session['admin_authenticated'] = True
            session.permanent = True
            return redirect(_safe_next(request.args.get('next')))
        flash('Invalid password', 'error')
    return render_template('admin/login.html')


@admin_bp.route('/logout')
def logout():
    """Log out admin."""
    session.pop('admin_authenticated', None)
    flash('Logged out successfully', 'success')
    return redirect(url_for('main.index'))


@admin_bp.route('/')
@admin_required
def dashboard():
    """Review list plus QR scan count."""
    services = get_services()
    result = services.review_query.fetch('created_at')
    if result.error:
        flash(result.error, 'error')

    try:
        qr_scan_count = services.qr_scans.count()
    except StoreError:
        qr_scan_count = None

    return render_template('admin/dashboard.html',
                           reviews=result.reviews,
                           qr_scan_count=qr_scan_count)


# ============== REVIEWS ==============

def _render_review_form(review=None, form=None, errors=None, status=200):
    form_values = dict(form) if form is not None else {}
    if review is not None and form is None:
        form_values = review.to_dict()
        form_values['location_type'] = 'address'
        form_values['curated_pick'] = 'on' if review.curated_pick else ''
        form_values['price_paid'] = f'{review.price_paid:.2f}'
        if review.has_location:
            form_values['coordinates'] = format_coordinates(review.latitude, review.longitude)

    return render_template('admin/review_form.html',
                           review=review,
                           form=form_values,
                           errors=errors or {},
                           cuisine_options=CUISINE_OPTIONS), status


def _submit_review(review=None):
    services = get_services()
    try:
        saved = services.submission.submit(
            request.form,
            photo=request.files.get('photo'),
            review_id=review.id if review else None
        )
    except ValidationError as e:
        flash('Please fix the errors below.', 'error')
        return _render_review_form(review, request.form, e.errors, status=400)
    except SubmissionError as e:
        flash(str(e), 'error')
        return _render_review_form(review, request.form, status=502)
    except StoreError:
        flash('Failed to save review', 'error')
        return _render_review_form(review, request.form, status=503)

    flash('Review updated successfully!' if review else 'Review added successfully!', 'success')
    current_app.logger.info(f"Admin saved review {saved.id}")
    return redirect(url_for('admin.dashboard'))


@admin_bp.route('/reviews/new', methods=['GET', 'POST'])
@admin_required
def new_review():
    """Add a review."""
    if request.method == 'POST':
        return _submit_review()
    return _render_review_form(form={'food_rating': 5, 'speed_rating': 5, 'service_rating': 5,
                                     'price_paid': '0.00', 'location_type': 'address'})


@admin_bp.route('/reviews/<review_id>/edit', methods=['GET', 'POST'])
@admin_required
def edit_review(review_id):
    """Edit an existing review."""
    review = get_services().store.get_review(review_id)
    if review is None:
        abort(404)

    if request.method == 'POST':
        return _submit_review(review)
    return _render_review_form(review)


@admin_bp.route('/reviews/<review_id>/delete', methods=['POST'])
@admin_required
def delete_review(review_id):
    """Delete a review, its likes and its photo."""
    services = get_services()
    review = services.store.get_review(review_id)
    if review is None:
        abort(404)

    name, photo_url = review.name, review.photo_url
    try:
        services.store.delete_review(review_id)
    except StoreError:
        flash('Failed to delete review', 'error')
        return redirect(url_for('admin.dashboard'))

    if photo_url:
        services.storage.delete_file(photo_url)

    flash(f'Deleted {name}', 'success')
    return redirect(url_for('admin.dashboard'))


# ============== AWARDS ==============

@admin_bp.route('/awards', methods=['GET', 'POST'])
@admin_required
def awards():
    """Choose which review wins each award."""
    services = get_services()

    if request.method == 'POST':
        assignments = {
            key[len('winner_'):]: value or None
            for key, value in request.form.items()
            if key.startswith('winner_')
        }
        try:
            services.awards.save_assignments(assignments)
        except (ValidationError, NotFoundError) as e:
            flash(f'Could not save awards: {e}', 'error')
            return redirect(url_for('admin.awards'))
        except StoreError:
            flash('Failed to save awards', 'error')
            return redirect(url_for('admin.awards'))

        flash('Awards saved', 'success')
        return redirect(url_for('admin.awards'))

    result = services.review_query.fetch('name')
    return render_template('admin/awards.html',
                           awards=services.awards.awards_with_winners(),
                           reviews=result.reviews)


@admin_bp.route('/awards/new', methods=['POST'])
@admin_required
def new_award():
    """Create an award category."""
    try:
        award = get_services().awards.create(
            title=request.form.get('title', ''),
            category=request.form.get('category', ''),
            award_id=request.form.get('id', '')
        )
    except ValidationError as e:
        flash(f'Could not create award: {e}', 'error')
        return redirect(url_for('admin.awards'))
    except StoreError:
        flash('Failed to create award', 'error')
        return redirect(url_for('admin.awards'))

    flash(f'Added award {award.title}', 'success')
    return redirect(url_for('admin.awards'))


@admin_bp.route('/awards/<award_id>/delete', methods=['POST'])
@admin_required
def delete_award(award_id):
    """Delete an award category and untag its winner."""
    try:
        get_services().awards.delete(award_id)
    except NotFoundError:
        abort(404)
    except StoreError:
        flash('Failed to delete award', 'error')
        return redirect(url_for('admin.awards'))

    flash('Award deleted', 'success')
    return redirect(url_for('admin.awards'))
