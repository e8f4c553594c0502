"""
API routes for AJAX/JSON endpoints.

Includes:
- Sorted and filtered review lists
- Like counts and like toggling for anonymous visitors
- Award winners
- Address geocoding for the admin form
"""

from flask import Blueprint, request, jsonify, g, session

from food_reviews.errors import NotFoundError, StoreError
from food_reviews.services import get_services
from food_reviews.services.likes_service import (
    VIEWER_COOKIE,
    VIEWER_COOKIE_MAX_AGE,
    is_valid_viewer_id,
    new_viewer_id,
)
from food_reviews.services.review_filters import FilterCriteria, filter_reviews

api_bp = Blueprint('api', __name__, url_prefix='/api')


def get_viewer_id():
    """The visitor's anonymous id, minting one if the cookie is missing or bad."""
    if 'viewer_id' not in g:
        viewer_id = request.cookies.get(VIEWER_COOKIE)
        if not is_valid_viewer_id(viewer_id):
            viewer_id = new_viewer_id()
            g.new_viewer_id = True
        g.viewer_id = viewer_id
    return g.viewer_id


@api_bp.after_app_request
def persist_viewer_id(response):
    if g.get('new_viewer_id'):
        response.set_cookie(
            VIEWER_COOKIE,
            g.viewer_id,
            max_age=VIEWER_COOKIE_MAX_AGE,
            httponly=True,
            samesite='Lax'
        )
    return response


@api_bp.route('/reviews')
def list_reviews():
    """
    Reviews sorted by ``sort`` and filtered by ``q``, ``cuisine``,
    ``max_price`` and ``curated``.
    """
    services = get_services()
    result = services.review_query.fetch(request.args.get('sort', 'created_at'))
    reviews = filter_reviews(result.reviews, FilterCriteria.from_args(request.args))

    try:
        likes = services.likes.summaries([r.id for r in reviews], get_viewer_id())
    except StoreError:
        likes = {}

    return jsonify({
        'success': result.error is None,
        'sort': result.sort_by,
        'reviews': [{**review.to_dict(), **likes.get(review.id, {'likes': 0, 'liked': False})}
                    for review in reviews],
        'error': result.error
    })


@api_bp.route('/reviews/<review_id>/likes')
def review_likes(review_id):
    """Like count and whether this visitor has liked the review."""
    try:
        status = get_services().likes.status(review_id, get_viewer_id())
    except StoreError as e:
        return jsonify({'success': False, 'error': str(e)}), 503
    return jsonify({'success': True, **status})


@api_bp.route('/reviews/<review_id>/like', methods=['POST'])
def toggle_like(review_id):
    """Like or unlike a review for this visitor."""
    try:
        result = get_services().likes.toggle(review_id, get_viewer_id())
    except NotFoundError:
        return jsonify({'success': False, 'error': 'Review not found'}), 404
    except StoreError as e:
        return jsonify({'success': False, 'error': str(e)}), 503

    status_code = 409 if result['ignored'] else 200
    return jsonify({'success': not result['ignored'], **result}), status_code


@api_bp.route('/awards')
def list_awards():
    """Awards with the id of their current winner."""
    try:
        awards = get_services().awards.awards_with_winners()
    except StoreError as e:
        return jsonify({'success': False, 'awards': [], 'error': str(e)}), 503

    return jsonify({
        'success': True,
        'awards': [
            {**award.to_dict(), 'winner': winner.to_dict() if winner else None}
            for award, winner in awards
        ],
        'error': None
    })


@api_bp.route('/geocode')
def geocode():
    """
    Geocode an address for the admin form preview.

    Query params:
        q: Free-text address (required)
    """
    if not session.get('admin_authenticated'):
        return jsonify({'success': False, 'error': 'Not logged in'}), 401

    query = request.args.get('q', '').strip()
    if not query:
        return jsonify({'success': False, 'latitude': None, 'longitude': None, 'error': 'Address required'}), 400

    return jsonify(get_services().geocoder.geocode(query))
