"""Health aggregation core: models, ports, and the metrics store."""
