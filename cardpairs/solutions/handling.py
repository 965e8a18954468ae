"""
Turns solver output into pairings and measures what the pairings achieve.

Contents
--------
- `decode_pairings`: Converts the `x` matrix of variable values into the ordered tuple of (sender, receiver) pairs.
- `build_activity_index`: Groups pairings by sender and by receiver.
- `check_constraints`: Lists every rule a set of pairings breaks (self, mutual, capacity, balance).
- `evaluate_solution`: Adds the pairings, activity index, and per-participant metrics to a solution dictionary.
- `compare_solutions`: Measures how similar two sets of pairings are.
- `solution_report` / `participant_dataframe`: Human readable and tabular summaries of a solution.
"""
import numpy as np
import pandas as pd

# cardpairs modules
import cardpairs.globals
from cardpairs.errors import MalformedInput


# ____________________________________________________DECODING__________________________________________________________
def decode_pairings(x, N, threshold=0.9):
    """
    Decodes the solved variable values into the set of pairings.

    Parameters:
        x (array-like): Values of all N^2 variables, either as an N x N matrix or a flat sequence in row order.
        N (int): Number of participants.
        threshold (float, optional): Values at or above this count as a pairing. Solvers sometimes return values
            like 0.9999998, so we never test for exact equality with 1. Defaults to 0.9.

    Returns:
        tuple: (sender, receiver) pairs ordered by sender and then receiver. Self pairs are never included.

    Raises:
        MalformedInput: If the number of values isn't exactly N^2 or a value isn't numeric.
    """

    try:
        values = np.asarray(x, dtype=float)
    except (TypeError, ValueError):
        raise MalformedInput("Solution values must be numeric.") from None
    if np.any(np.isnan(values)):
        raise MalformedInput("Solution values are missing (None/NaN).")

    if values.size != N * N:
        raise MalformedInput("Expected " + str(N * N) + " solution values for " + str(N) + " participants, got " +
                             str(values.size) + ".")
    values = values.reshape((N, N))

    return tuple((i, j) for i in range(N) for j in range(N) if i != j and values[i, j] >= threshold)


def build_activity_index(pairings, N):
    """
    Groups the pairings by sender and by receiver

    :param pairings: ordered (sender, receiver) pairs
    :param N: number of participants
    :return: dictionary with "sends_by" (receivers of each participant) and "receives_by" (senders to each
    participant). Both keep the order of the pairings.
    """

    sends_by, receives_by = [[] for _ in range(N)], [[] for _ in range(N)]
    for i, j in pairings:
        if not (0 <= i < N and 0 <= j < N):
            raise MalformedInput("Pairing " + str((i, j)) + " references a participant outside 0.." + str(N - 1) + ".")
        sends_by[i].append(j)
        receives_by[j].append(i)

    return {"sends_by": sends_by, "receives_by": receives_by}


# ___________________________________________________EVALUATION_________________________________________________________
def check_constraints(pairings, requests):
    """
    Checks the pairings against the rules of the pairing model.

    Parameters:
        pairings (iterable): (sender, receiver) pairs.
        requests (sequence): Number of cards each participant wanted to send.

    Returns:
        list of str: One message per broken rule. An empty list means the pairings are valid.
    """

    N = len(requests)
    failed_constraints = []
    pairing_set = set()
    sent, received = np.zeros(N, dtype=int), np.zeros(N, dtype=int)

    for i, j in pairings:
        if i == j:
            failed_constraints.append("Participant " + str(i) + " sends a card to themself.")
        if (j, i) in pairing_set:
            failed_constraints.append("Participants " + str(min(i, j)) + " and " + str(max(i, j)) +
                                      " send cards to each other.")
        if (i, j) in pairing_set:
            failed_constraints.append("Participant " + str(i) + " sends more than one card to participant " +
                                      str(j) + ".")
        pairing_set.add((i, j))
        sent[i] += 1
        received[j] += 1

    for i in range(N):
        if sent[i] > requests[i]:
            failed_constraints.append("Participant " + str(i) + " sends " + str(sent[i]) + " cards but requested " +
                                      str(requests[i]) + ".")
        if sent[i] != received[i]:
            failed_constraints.append("Participant " + str(i) + " sends " + str(sent[i]) + " cards but receives " +
                                      str(received[i]) + ".")

    return failed_constraints


def evaluate_solution(solution, parameters, threshold=0.9, printing=False):
    """
    Evaluate a solution by decoding the pairings and calculating various metrics.

    Parameters:
        solution (dict): The solution to evaluate. Needs either "x" (the variable values) or "pairings".
        parameters (dict): The fixed participant parameters.
        threshold (float, optional): Decoding threshold for the variable values. Defaults to 0.9.
        printing (bool, optional): Whether to print a warning if the pairings break a constraint. Defaults to False.

    Returns:
        solution (dict): The same dictionary with the metrics added.
    """

    # Shorthand
    p = parameters
    N = p['N']

    # Decode the pairings if necessary
    if 'pairings' not in solution:
        solution['pairings'] = decode_pairings(solution['x'], N, threshold=threshold)
    else:
        solution['pairings'] = tuple((int(i), int(j)) for i, j in solution['pairings'])

    # Group pairings by participant
    index = build_activity_index(solution['pairings'], N)
    solution['sends_by'], solution['receives_by'] = index['sends_by'], index['receives_by']

    # Participant metrics
    solution['sent_count'] = np.array([len(receivers) for receivers in solution['sends_by']], dtype=int)
    solution['received_count'] = np.array([len(senders) for senders in solution['receives_by']], dtype=int)
    solution['fulfilled'] = solution['sent_count'] == p['requests']
    solution['num_pairings'] = len(solution['pairings'])
    solution['num_fulfilled'] = int(np.sum(solution['fulfilled']))

    # Constraint checks (should always be empty for a solution that came from the model)
    solution['failed_constraints'] = check_constraints(solution['pairings'], p['requests'])
    solution['total_failed_constraints'] = len(solution['failed_constraints'])
    if printing and solution['total_failed_constraints'] > 0:
        print("WARNING. Solution breaks " + str(solution['total_failed_constraints']) + " constraint(s):")
        for message in solution['failed_constraints']:
            print("  " + message)

    return solution


def compare_solutions(baseline, compared, printing=False):
    """
    Compare two sets of pairings to the same problem.

    Parameters:
        baseline (iterable): The first set of (sender, receiver) pairs.
        compared (iterable): The second set of (sender, receiver) pairs.
        printing (bool, optional): Whether to print the similarity percentage. Defaults to False.

    Returns:
        percent_similar (float): Fraction of all pairings (from either solution) that both solutions share.
        Two empty solutions are identical.

    Example:
        compare_solutions([(0, 1), (1, 0)], [(0, 1), (1, 2), (2, 0)])  # 0.25
    """

    baseline, compared = set(baseline), set(compared)
    union = baseline | compared
    if len(union) == 0:
        percent_similar = 1.0
    else:
        percent_similar = len(baseline & compared) / len(union)

    if printing:
        print("The solutions are " + str(np.around(percent_similar * 100, 2)) + "% similar.")

    return percent_similar


# ___________________________________________________REPORTING__________________________________________________________
def solution_report(solution, parameters):
    """
    Builds the human readable report of a solution: for each participant the requested cards, the actual cards sent
    and received, and who they send to and receive from. Then the totals.
    """

    p = parameters
    lines = []
    for i in p['I']:
        lines.append("Participant " + str(i) + " requests " + str(p['requests'][i]) + " cards (actual sent: " +
                     str(len(solution['sends_by'][i])) + ", received: " + str(len(solution['receives_by'][i])) + ")")
        for j in solution['sends_by'][i]:
            lines.append("send: " + str(j))
        for j in solution['receives_by'][i]:
            lines.append("receive: " + str(j))

    lines.append("Total number of participants: " + str(p['N']))
    lines.append("Total number of pairings: " + str(len(solution['pairings'])))
    return "\n".join(lines)


def participant_dataframe(solution, parameters):
    """
    Per-participant metrics as a pandas dataframe (one row per participant)
    """

    p = parameters
    labels = cardpairs.globals.metric_label_dict
    df = pd.DataFrame({"Participant": p['I'], "Original Position": p['order'],
                       labels['requests']: p['requests'], labels['sent_count']: solution['sent_count'],
                       labels['received_count']: solution['received_count'],
                       labels['fulfilled']: solution['fulfilled'],
                       "Sends To": [", ".join(str(j) for j in receivers) for receivers in solution['sends_by']],
                       "Receives From": [", ".join(str(j) for j in senders) for senders in solution['receives_by']]})
    return df
