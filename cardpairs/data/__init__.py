"""
The `data` module prepares everything the pairing model needs before a solver is ever involved.

- **requests**:
    - Validates the request vector (non-negative integer card counts).
    - Expands shorthand notation such as `"2x5"` into full request vectors.
    - Builds the fixed parameter dictionary `p` used across the package.
- **support**:
    - Holds the default functional parameters (`mdl_p`) for solving, decoding, and visualizing.

See Also
--------
- [`solutions.optimization`](../solutions/optimization.py): Consumes `p` to build the Pyomo model.
"""
