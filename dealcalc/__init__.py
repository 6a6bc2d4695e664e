"""Licensing deal calculator: transfer-price and profit-share deal economics."""
