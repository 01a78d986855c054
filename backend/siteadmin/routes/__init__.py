# Routes package init
"""
SiteAdmin Backend - API Routes Package
======================================

Route Inventory:
    - content.py:  GET/POST pairs generated from the resource table
    - upload.py:   POST /api/upload-image
    - contact.py:  POST /api/send-email
    - admin.py:    POST /api/admin-login
    - health.py:   GET /  and  GET /health

Routes stay thin: they pull components from siteadmin.dependencies, run the
validation layer, call one service and shape the response. Errors are raised,
never formatted here; main.py maps them to responses.
"""
