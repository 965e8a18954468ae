import numpy as np

# cardpairs modules
import cardpairs.globals


def initialize_instance_functional_parameters(N):
    """
    Initializes the various instance parameters for the CardExchangeProblem object.

    Parameters:
        N (int): The number of participants in the problem instance.

    Returns:
        dict: A dictionary containing the initialized instance parameters.

    This function initializes the hyperparameters and toggles for the CardExchangeProblem object. It sets default
    values for the solver, the solution decoder, the solution matrix image, and the activity chart.

    Note: The analyst can modify the default parameter values by specifying new values in this initialization
    function or by passing them as arguments when calling the CardExchangeProblem object methods.
    """

    mdl_p = {

        # Generic Solution Handling
        "add_to_dict": True, "set_to_instance": True,

        # Pyomo General Parameters
        "solver_name": "highs", "pyomo_max_time": None, "provide_executable": False, "executable": None,
        "exe_extension": False, "pyomo_tee": False, "pyomo_progress_bar": False,

        # Solution Decoding
        "decode_threshold": 0.9,

        # Solution Matrix Image
        "cell_size": 9, "border_size": 1, "active_color": cardpairs.globals.matrix_colors["active"],
        "border_color": cardpairs.globals.matrix_colors["border"], "color_scale": 128,

        # Generic Chart Handling
        "save": True, "figsize": (max(8, min(19, int(np.ceil(N / 3)))), 8), "facecolor": "white", "dpi": 100,
        "title": None, "filename": None, "display_title": True, "label_size": 20, "tick_size": 14,
        "legend_size": 15, "title_size": 22, "bar_width": 0.27, "legend_loc": "upper left",

        # Activity Chart Colors
        "bar_colors": {"requests": "#bfbfbf", "sent_count": "#3287cd", "received_count": "#f28e2b"},
    }

    return mdl_p
