# Routes package init
"""
Natours Backend — API Routes
==============================

Router Inventory (mounted in this order by create_app):
    users.router           /api/v1/users
    tours.router           /api/v1/tours
    reviews.tour_reviews   /api/v1/tours/{tourId}/reviews
    reviews.router         /api/v1/reviews
    health.router          /health
    fallback.router        everything else → 404
"""
