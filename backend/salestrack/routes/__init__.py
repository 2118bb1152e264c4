"""
SalesTrack Backend — API Routes Package
=========================================

Route Inventory:
    - auth.py:        POST /api/login
    - products.py:    GET  /api/products, CRUD /api/owner/products
    - categories.py:  GET  /api/categories, CRUD /api/owner/categories
    - sellers.py:     CRUD /api/owner/sellers
    - health.py:      GET  /health, GET /, POST /api/owner/sync

Routes stay thin: they read the body, hand the request's document session
to a service, and wrap the result in the success envelope.
"""
