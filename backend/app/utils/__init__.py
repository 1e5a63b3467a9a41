# Utils package init
"""
Natours Backend — Request Utilities
=====================================

    - catch_async:     funnels handler errors into the central error handler
    - query_features:  ?filter/sort/fields/page/limit parsing for list endpoints
"""
