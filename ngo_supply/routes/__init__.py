# ngo_supply/routes/__init__.py
NAMESPACE = "/supply/ws"
