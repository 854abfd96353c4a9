"""
Domain services used by the API routers.

Each service is built per request from the request's database session and
``Caller``; authorization is enforced here before any repository write.
"""
