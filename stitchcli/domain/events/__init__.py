"""Domain events emitted while requests are admitted, sent and cached.
"""
