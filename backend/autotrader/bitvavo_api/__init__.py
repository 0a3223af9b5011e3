"""
Bitvavo API Integration

- Request signing (HMAC-SHA256 access headers)
- Signed REST client for balances, prices, orders, assets, fees and server time
- Redacted curl-style request logging
"""
