"""Upstream providers that match source archive URLs and look up their releases."""