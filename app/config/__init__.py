# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, HTTP URLs and the ASGI application. The ASGI application serves
# both Django views and the chat WebSocket gateway through Django Channels.
# =============================================================================
