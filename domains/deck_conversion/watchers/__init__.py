"""
Deck Conversion Watchers

Event sources that report presentations appearing in the input directory.
"""
