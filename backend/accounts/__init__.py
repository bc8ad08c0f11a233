# accounts/__init__.py
"""
Accounts app - Authentication and identity for ScoutDesk.

This app provides:
- User: Custom user model (email login, troop role)
- ActorContext: Authorization context passed to commands
- JWT login/refresh endpoints
"""
