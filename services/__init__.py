"""Business services for order settlement, fraud screening and rankings."""
