# Dependencies package init
"""
FastAPI dependencies shared by several routers (authentication and roles).
"""
