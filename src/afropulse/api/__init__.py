"""FastAPI surface over the buzz aggregation core."""
