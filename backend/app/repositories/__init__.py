# Repositories package init
"""
Natours Backend — Data Access Layer
=====================================

What:  Thin per-entity repositories around an AsyncSession.
Why:   The persistence hooks of each entity (slug derivation, secret-tour
       filtering, guide population, password hashing) are explicit named
       interceptor functions, and the repositories are the only place that
       calls them. Services never build entity queries themselves.

Interceptor inventory:
    tour_repository.derive_slug                    before save
    tour_repository.exclude_secret_tours           before every find variant
    tour_repository.populate_guides                after every find variant
    tour_repository.exclude_secret_from_aggregate  before every aggregate
    user_repository.hash_password                  before save (new password)
    review_repository.populate_review_authors      after every find variant
"""
