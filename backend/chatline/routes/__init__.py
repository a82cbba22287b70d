# backend/chatline/routes/__init__.py
