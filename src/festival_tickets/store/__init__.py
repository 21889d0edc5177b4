"""Cart, catalog, discount, and checkout logic for the ticket store."""
