# Routes package init
"""
Meetapp Backend: API Routes Package
====================================

What:  HTTP route handlers. Each handler extracts request data, calls a
       service and shapes the response; business rules live in services.

Route Inventory:
    - users.py:          POST /users, PUT /users
    - sessions.py:       POST /sessions
    - files.py:          POST /files, GET /files/{path}
    - meetups.py:        GET/POST /meetups, GET/PUT/DELETE /meetups/{id}
    - organizing.py:     GET /organizing
    - subscriptions.py:  GET /subscriptions,
                         POST/DELETE /meetups/{id}/subscriptions
    - health.py:         GET /health
"""
