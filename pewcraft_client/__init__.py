"""Terminal client that walks an operator through setting up and joining a pewcraft game."""
