"""
`cardpairs.data.requests`
=========================

Builds the request vector: the ordered number of cards each participant wants to send. This is the only
input to the pairing problem, so everything downstream (the Pyomo model, the decoder, the matrix image)
reads from the parameter dictionary constructed here.

Main Capabilities
-----------------
- **Validation** (`validate_requests`):
  Checks that every request is a non-negative integer and returns a read-only numpy array.
- **Shorthand notation** (`parse_shorthand`):
  Expands tokens like `"3x4"` into four participants requesting three cards each.
- **Parameter construction** (`build_parameters`):
  Produces the `p` dictionary (`N`, `I`, `requests`, `order`) shared by the rest of the package.
"""
import numpy as np

# cardpairs modules
from cardpairs.errors import MalformedInput


def validate_requests(requests):
    """
    Validates the request vector and returns it as a read-only integer array. The caller's sequence is not touched.

    Parameters:
        requests (sequence): Number of cards each participant wants to send.

    Returns:
        numpy.ndarray: Read-only integer array of the requests.

    Raises:
        MalformedInput: If the requests aren't a flat sequence of non-negative integers.
    """

    if requests is None or isinstance(requests, (str, bytes)):
        raise MalformedInput("Requests must be a sequence of non-negative integers, got " + repr(requests) + ".")

    values = []
    for i, r in enumerate(requests):

        # Booleans are technically integers but they're never a card count
        if isinstance(r, (bool, np.bool_)) or not isinstance(r, (int, np.integer, float, np.floating)):
            raise MalformedInput("Request for participant " + str(i) + " is not a number: " + repr(r) + ".")

        # Allow 2.0 but not 2.5 (or nan/inf)
        if isinstance(r, (float, np.floating)) and not float(r).is_integer():
            raise MalformedInput("Request for participant " + str(i) + " is not an integer: " + repr(r) + ".")

        if r < 0:
            raise MalformedInput("Request for participant " + str(i) + " is negative: " + str(int(r)) + ".")

        values.append(int(r))

    requests = np.array(values, dtype=int)
    requests.setflags(write=False)
    return requests


def parse_shorthand(args):
    """
    Expands shorthand request notation into the full request vector.

    Each token is either "K" (one participant requesting K cards) or "KxM" (M participants each requesting K cards).
    Tokens may also be passed together in one whitespace separated string.

    Example:
        parse_shorthand(["1x3", "2x3", "3x4"])  # [1, 1, 1, 2, 2, 2, 3, 3, 3, 3]
        parse_shorthand(["3"])  # [3]

    Parameters:
        args (list of str): Command line style tokens.

    Returns:
        list of int: The expanded request vector.

    Raises:
        MalformedInput: If a token can't be parsed.
    """

    result = []
    for arg in args:
        for token in str(arg).split():
            num_str, x, count_str = token.partition('x')

            try:
                num = int(num_str)
            except ValueError:
                raise MalformedInput("Invalid number: '" + num_str + "' (in token '" + token + "').") from None

            # Single number
            if not x:
                result.append(num)
                continue

            # "NxM" format
            try:
                count = int(count_str)
            except ValueError:
                raise MalformedInput("Invalid count: '" + count_str + "' (in token '" + token + "').") from None
            if count < 0:
                raise MalformedInput("Invalid count: '" + count_str + "' (in token '" + token + "').")

            result.extend([num] * count)

    return result


def build_parameters(requests, sort_requests=False):
    """
    Constructs the fixed parameter dictionary "p" for the pairing problem.

    Parameters:
        requests (sequence): Number of cards each participant wants to send.
        sort_requests (bool, optional): Sort the requests in ascending order before assigning participant indices.
            Defaults to False.

    Returns:
        dict: Parameter dictionary with the following keys
            - 'N': number of participants
            - 'I': participant indices
            - 'requests': read-only request vector (in participant index order)
            - 'order': original position of each participant in the given requests
    """

    requests = validate_requests(requests)

    # Sort the participants if necessary (stable, so ties keep their original order)
    if sort_requests:
        order = np.argsort(requests, kind='stable')
        requests = requests[order]
        requests.setflags(write=False)
    else:
        order = np.arange(len(requests))

    p = {'N': len(requests), 'I': np.arange(len(requests)), 'requests': requests, 'order': order}
    return p
