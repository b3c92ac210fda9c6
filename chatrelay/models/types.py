"""
Common type aliases used across the application.
"""

UserId = str
ConversationId = str
RecipientId = str
ActionName = str
