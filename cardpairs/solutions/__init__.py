"""
The `solutions` module takes the request vector through the optimization workflow.

- **[`solutions.optimization`](optimization.py)**
  Builds the binary pairing model in Pyomo and runs it through the selected solver:
    - No self exchange, no mutual exchange, sender capacity, and card balance constraints
    - Maximizes the number of cards exchanged
- **[`solutions.handling`](handling.py)**
  Works with the solved values:
    - Decodes the pairings (0.9 threshold for solver round-off)
    - Groups pairings by sender/receiver and checks them against the constraints
    - Builds the text report and the participant dataframe

Typical Workflow
----------------

1. Build the model from the request vector (`pairing_model_build`)
1. Solve it (`solve_pyomo_model`)
1. Evaluate the solution (`evaluate_solution`) and report on it (`solution_report`)
"""
