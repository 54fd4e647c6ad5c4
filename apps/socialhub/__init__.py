"""SocialHub messaging backend: REST API, realtime presence and delivery."""
