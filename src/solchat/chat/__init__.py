"""Chat engine for solchat - intent routing, conversation memory and sessions."""
