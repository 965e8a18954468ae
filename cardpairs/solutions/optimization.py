"""
This module contains the **Pyomo-based optimization model logic** used to solve the card exchange pairing
problem, along with the solver configuration and execution wrappers.

Contents
--------
- **Model Construction**
    - `pairing_model_build`: Builds the binary pairing model (N^2 `x` variables, four constraint families).
- **Solving**
    - `build_solver`: Configures the selected Pyomo solver (HiGHS, CBC, Gurobi, or a provided executable).
    - `execute_solver`: Runs the solver with an optional time limit and progress bar.
    - `solve_pyomo_model`: Unified wrapper to solve the model and extract the variable values.

Workflow
--------
1. **Model Building**
    - `x[i, j] = 1` if participant i sends a card to participant j.
    - Nobody sends a card to themself, nobody sends a card to someone who sent them one, nobody sends more
      cards than they signed up for, and everyone receives one card for each card they send.
    - Maximize the total number of cards exchanged.
1. **Solving**
    - The model always has a feasible solution (nobody sends anything), so an "infeasible" answer from the
      solver is raised as an error rather than handled.
    - Extract the `x` matrix of variable values; decoding into pairings happens in `solutions.handling`.

See Also
--------
- [`solutions.handling`](handling.py): Decodes the `x` matrix and evaluates the resulting pairings.
"""
import time
import numpy as np
import logging
import warnings
import datetime
import sys
import threading
from pyomo.environ import *
from pyomo.opt import TerminationCondition
from pyomo.common.errors import ApplicationError

# cardpairs modules
import cardpairs.globals
from cardpairs.errors import InfeasibleModel, MalformedInput, SolverError

# Ignore warnings
logging.getLogger('pyomo.core').setLevel(logging.ERROR)
warnings.filterwarnings('ignore', module='pyomo')

# Termination conditions where the solver hands back a usable assignment
usable_termination_conditions = [TerminationCondition.optimal, TerminationCondition.globallyOptimal,
                                 TerminationCondition.locallyOptimal, TerminationCondition.feasible,
                                 TerminationCondition.maxTimeLimit, TerminationCondition.maxIterations]
infeasible_termination_conditions = [TerminationCondition.infeasible, TerminationCondition.infeasibleOrUnbounded]


# ______________________________________________PAIRING MODEL_____________________________________________________________
def pairing_model_build(p, printing=False):
    """
    Builds the card exchange pairing model.

    Parameters:
        p (dict): Fixed parameters (see `cardpairs.data.requests.build_parameters`).
        printing (bool, optional): Whether the procedure should print something. Default is False.

    Returns:
        ConcreteModel: The pyomo model

    Description:
        One binary variable exists for every ordered pair of participants, including the pairs (i, i). The self
        pairs are pinned to zero with their own constraint list.

        The model has exactly four constraint lists:
        - `no_self_exchange_constraints`: x[i, i] == 0
        - `no_mutual_exchange_constraints`: x[i, j] + x[j, i] <= 1 for i < j (both may be zero)
        - `num_cards_constraints`: cards sent by i <= requests[i]
        - `card_balance_constraints`: cards sent by i - cards received by i == 0

        The objective maximizes the total number of cards exchanged. A participant may end up sending fewer cards
        than requested; the model never becomes infeasible because of unmet requests.

    Example:
        p = build_parameters([2, 2, 2])
        model = pairing_model_build(p, printing=True)
    """

    # Shorthand
    requests = p['requests']
    I = [int(i) for i in p['I']]

    if len(requests) != len(I):
        raise MalformedInput("Request vector has " + str(len(requests)) + " entries but there are " + str(len(I)) +
                             " participants.")
    if np.any(np.asarray(requests) < 0):
        raise MalformedInput("Request counts must be non-negative.")

    if printing:
        print("Building card exchange pairing model (" + str(len(I)) + " participants)...")

    # Build Model
    m = ConcreteModel()

    # ___________________________________VARIABLE DEFINITION_________________________________
    m.x = Var(((i, j) for i in I for j in I), within=Binary)  # 1 if person i sends a card to person j

    # ________________________________________CONSTRAINTS_____________________________________
    # Nobody sends a card to themself
    m.no_self_exchange_constraints = ConstraintList()
    for i in I:
        m.no_self_exchange_constraints.add(expr=m.x[i, i] == 0)

    # Nobody sends a card to someone who sent a card to them
    m.no_mutual_exchange_constraints = ConstraintList()
    for i in I:
        for j in range(i + 1, len(I)):
            m.no_mutual_exchange_constraints.add(expr=m.x[i, j] + m.x[j, i] <= 1)

    # Nobody sends more cards than they signed up for
    m.num_cards_constraints = ConstraintList()
    for i in I:
        m.num_cards_constraints.add(expr=sum(m.x[i, j] for j in I) <= int(requests[i]))

    # Everyone receives a card for every card they send (not necessarily from the same people)
    m.card_balance_constraints = ConstraintList()
    for i in I:
        m.card_balance_constraints.add(expr=sum(m.x[i, j] for j in I) - sum(m.x[j, i] for j in I) == 0)

    # ___________________________________OBJECTIVE FUNCTION__________________________________
    m.objective = Objective(expr=sum(m.x[i, j] for i in I for j in I), sense=maximize)

    return m  # Return model


# ___________________________________________________SOLVING____________________________________________________________
def build_solver(mdl_p, printing=False):
    """
    Returns the pyomo solver object specified by the functional parameters.

    "highs" looks for the appsi HiGHS interface first and then the newer "highs" interface (both use the `highspy`
    package). Any other name is handed to the pyomo SolverFactory, along with an executable if one is provided.
    """

    # Determine how the solver is called here
    if mdl_p["executable"] is None:
        if mdl_p["provide_executable"]:
            if mdl_p["exe_extension"]:
                mdl_p["executable"] = cardpairs.globals.paths['solvers'] + mdl_p["solver_name"] + '.exe'
            else:
                mdl_p["executable"] = cardpairs.globals.paths['solvers'] + mdl_p["solver_name"]
    else:
        mdl_p["provide_executable"] = True

    # Get correct solver
    if mdl_p["solver_name"] == "highs":
        solver = None
        for solver_name in ("appsi_highs", "highs"):
            candidate = SolverFactory(solver_name)
            if candidate.available(exception_flag=False):
                solver = candidate
                break
        if solver is None:
            raise SolverError("No available HiGHS solver found. Install 'highspy' or choose another solver.")
    else:
        if mdl_p["provide_executable"]:
            solver = SolverFactory(mdl_p["solver_name"], executable=mdl_p["executable"])
        else:
            solver = SolverFactory(mdl_p["solver_name"])

        if not solver.available(exception_flag=False):
            raise SolverError("Solver '" + str(mdl_p["solver_name"]) + "' is not available.")

    # Print Statement
    if printing:
        timestamp = datetime.datetime.now().strftime('%B %d %Y %r')
        print(f'Solving pairing model instance with solver {mdl_p["solver_name"]}...'
              f'\nStart Time: {timestamp}.')
    return solver


def execute_solver(model, solver, mdl_p):
    """
    Solves the Pyomo model (with a progress bar if a time limit is specified and the bar is turned on).

    Args:
        model (ConcreteModel): The Pyomo model to solve.
        solver (SolverFactory): The solver instance.
        mdl_p (dict): Dictionary of model parameters including solver config.

    Returns:
        SolverResults: The pyomo results object.
    """
    def print_progress_bar(duration, stop_event):
        start_time = time.time()
        bar_length = 40
        while not stop_event.is_set():
            elapsed = time.time() - start_time
            percent = min(elapsed / duration, 0.99)
            filled_len = int(bar_length * percent)
            bar = '#' * filled_len + '-' * (bar_length - filled_len)
            eta = int(duration - elapsed) if elapsed < duration else 1
            sys.stdout.write(f'\rSolver running: |{bar}| {percent*100:5.1f}% ETA: ~{eta}s ')
            sys.stdout.flush()
            stop_event.wait(1)
        sys.stdout.write(f'\rSolver complete: |{"#" * bar_length}| 100.0%              \n')
        sys.stdout.flush()

    max_time, tee = mdl_p["pyomo_max_time"], mdl_p["pyomo_tee"]
    solver_name = mdl_p["solver_name"]

    # Solver specific time limit options
    kwargs = {"tee": tee}
    if max_time is not None:
        if solver_name == 'highs':
            kwargs['timelimit'] = max_time
        elif solver_name == 'cbc':
            solver.options['seconds'] = max_time
        elif solver_name == 'glpk':
            solver.options['tmlim'] = max_time
        elif solver_name == 'gurobi':
            kwargs['options'] = {'TimeLimit': max_time}
        else:
            kwargs['timelimit'] = max_time

    # If time limit is set, start the timer bar
    show_bar = max_time is not None and mdl_p["pyomo_progress_bar"]
    if show_bar:
        stop_event = threading.Event()
        thread = threading.Thread(target=print_progress_bar, args=(max_time, stop_event))
        thread.start()

    # Solve Model
    try:
        try:
            results = solver.solve(model, **kwargs)
        except RuntimeError as error:

            # Some HiGHS interfaces raise when there is no solution to load, so we look at the status instead
            if "A feasible solution was not found" not in str(error):
                raise
            results = solver.solve(model, load_solutions=False, **kwargs)
    except (ApplicationError, RuntimeError, ValueError) as error:
        raise SolverError("Solver '" + str(solver_name) + "' failed: " + str(error)) from error
    finally:
        if show_bar:
            stop_event.set()
            thread.join()

    return results


def solve_pyomo_model(model, p, mdl_p, printing=False):
    """
    Solve the pairing model and return the solution dictionary.

    Args:
        model (ConcreteModel): The pairing model from `pairing_model_build`.
        p (dict): Fixed parameters.
        mdl_p (dict): Functional parameters (solver settings).
        printing (bool, optional): Flag for printing intermediate information.

    Returns:
        dict: The solution with keys
            - 'method': "MILP"
            - 'x': N x N matrix of variable values as returned by the solver
            - 'x_integer': False if any value came back fractional
            - 'pyomo_obj_value': Objective value
            - 'termination_condition': Solver termination condition
            - 'solve_time': Seconds spent in the solver

    Raises:
        InfeasibleModel: If the solver reports the model as infeasible.
        SolverError: If the solver fails or finishes without a usable assignment.
    """

    N = p['N']
    I = [int(i) for i in p['I']]
    solution = {"method": "MILP", "x": np.zeros((N, N)), "x_integer": True, "pyomo_obj_value": 0.0,
                "termination_condition": "trivial", "solve_time": 0.0}

    # With fewer than two participants there is no pair to send a card to
    if N < 2:
        if printing:
            print("Fewer than two participants. Nothing to solve.")
        return solution

    # Determine how the solver is called here
    solver = build_solver(mdl_p, printing)

    # Solve Model
    start_time = time.perf_counter()
    results = execute_solver(model, solver, mdl_p)
    solution['solve_time'] = round(time.perf_counter() - start_time, 2)

    # Check the status of the solver
    termination_condition = results.solver.termination_condition
    solution['termination_condition'] = str(termination_condition)
    if termination_condition in infeasible_termination_conditions:
        raise InfeasibleModel("Solver reported the pairing model as " + str(termination_condition) +
                              ". The empty pairing is always feasible, so the model or solver is broken.")
    if termination_condition not in usable_termination_conditions:
        raise SolverError("Solver finished with termination condition '" + str(termination_condition) + "' (status '" +
                          str(results.solver.status) + "'): " + str(results.solver.message))

    # Load the solution if the solver didn't already do so
    if hasattr(solver, "load_vars") and any(m_var.value is None for m_var in model.x.values()):
        try:
            solver.load_vars()
        except RuntimeError as error:
            raise SolverError("Solver finished without a solution to load: " + str(error)) from error

    # Get the x matrix
    for i in I:
        for j in I:
            x_val = model.x[i, j].value
            if x_val is None:
                raise SolverError("Solver finished (" + str(termination_condition) + ") but variable x[" + str(i) +
                                  ", " + str(j) + "] has no value.")
            solution['x'][i, j] = x_val

            if 0.01 < x_val < 0.99:
                solution['x_integer'] = False

    # Get objective value
    solution['pyomo_obj_value'] = round(model.objective(), 4)

    if printing:
        print("Solved in " + str(solution['solve_time']) + " seconds. Objective value: " +
              str(solution['pyomo_obj_value']))

    return solution
