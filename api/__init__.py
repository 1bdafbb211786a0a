"""
HTTP API of the board backend, built with FastAPI.

It contains the application factory (app), request/response schemas,
error mapping, middleware and the resource routers.
"""
