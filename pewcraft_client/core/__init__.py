"""Session-setup workflow (context chain, states, events and transitions).

Kept free of curses and HTTP concerns so it can be driven by the terminal client and by tests.
"""
