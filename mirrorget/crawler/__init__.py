"""Mirroring core: path derivation, throttling, fetching and recursive crawl."""
