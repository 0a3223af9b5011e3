"""Executes TradingView alerts as market orders on Bitvavo."""
