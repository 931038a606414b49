"""
auth: user authentication module.

Provides:
  • Signed token issue & verification (``TokenService``)
  • Password hashing (bcrypt)
  • Ownership guard for ``/users/{user_id}`` routes
  • ``get_current_identity`` / ``require_owner`` FastAPI dependencies
"""
