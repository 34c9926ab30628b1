"""Trading Engine Service: tokenized allowance offers and their settlement."""
