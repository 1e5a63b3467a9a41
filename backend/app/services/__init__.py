# Services package init
"""
Natours Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and repositories (persistence).
Why:   Routes handle HTTP; services apply the business rules and build the
       response envelopes.
How:   Stateless singletons. Every call receives the request's AsyncSession
       (and, for auth, the TokenService) explicitly.

Service Inventory:
    - TokenService: JWT signing and verification (built from Settings)
    - passwords: bcrypt hashing helpers (passlib)
    - AuthService: signup, login, token subject resolution
    - UserService: admin user management
    - TourService: tour CRUD, top-5-cheap alias, stats and monthly plan
    - ReviewService: review listing, creation and deletion
"""
