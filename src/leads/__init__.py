"""Lead validation, encoding and the quote/checkout service."""
