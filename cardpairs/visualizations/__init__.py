"""
Visual output for a solved card exchange.

- **matrix**: pixel grid of the pairings (sender rows, receiver columns), saved with Pillow.
- **charts**: matplotlib bar chart of requested vs. sent vs. received cards.
"""
