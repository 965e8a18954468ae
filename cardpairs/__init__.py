"""
`cardpairs` solves card exchange pairings: every participant asks to send some number of cards, and the package
decides who sends a card to whom.

- **data**: request vector validation, shorthand notation, and default functional parameters.
- **solutions**: the Pyomo pairing model, solver handling, decoding, evaluation, and reporting.
- **visualizations**: the solution matrix image and the participant activity chart.
- **main**: the `CardExchangeProblem` object tying it all together.
"""
