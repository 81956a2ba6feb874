"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- No Stripe secret key is configured
- We want to test the endpoints end-to-end without external dependencies

Mock clients follow the SAME interface as the real clients
(src/integrations/contracts/interfaces.py).
"""
