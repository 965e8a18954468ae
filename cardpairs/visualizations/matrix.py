"""
Solution matrix image: an N x N grid where row i is the sender and column j the receiver.

A realized pairing fills its cell with the "active" color. Every other off-diagonal cell is split along the
diagonal from its top-left to bottom-right corner: the upper triangle (dx >= dy) is shaded by how many cards
column j receives and the lower triangle (dx < dy) by how many cards row i sends, each relative to the busiest
row/column. Busier means darker. Diagonal cells (i == j) are never drawn and stay the border color.

The canvas is a plain (height, width, 3) uint8 numpy array so it can be compared byte for byte. Writing it to a
file is left to Pillow.
"""
import numpy as np
from PIL import Image

# cardpairs modules
import cardpairs.globals
from cardpairs.errors import MalformedInput


def canvas_size(N, cell_size=9, border_size=1):
    """N cells plus N+1 borders along each side"""
    return N * cell_size + (N + 1) * border_size


def cell_origin(row, col, cell_size=9, border_size=1):
    """Returns the (x, y) pixel coordinates of the top-left corner of the cell"""
    return border_size + col * (cell_size + border_size), border_size + row * (cell_size + border_size)


def grey_shade(count, max_count, color_scale=128):
    """
    Channel value for an activity count: 256 - round(ratio * color_scale), clamped to 0-255. The ratio is
    count / max_count, or 0 when max_count is 0.
    """
    ratio = count / max_count if max_count > 0 else 0.0
    shade = 256 - int(np.floor(ratio * color_scale + 0.5))
    return int(min(255, max(0, shade)))


def check_color(color, name):
    color = tuple(int(c) for c in color)
    if len(color) != 3 or any(c < 0 or c > 255 for c in color):
        raise MalformedInput("Color '" + name + "' must be three values between 0 and 255, got " + str(color) + ".")
    return color


def render_solution_matrix(pairings, requests, cell_size=9, border_size=1, active_color=None, border_color=None,
                           color_scale=128):
    """
    Renders the solution matrix canvas.

    Parameters:
        pairings (iterable): (sender, receiver) pairs.
        requests (sequence): Request vector (only its length is used, to size the grid).
        cell_size (int, optional): Edge length of each cell in pixels. Defaults to 9.
        border_size (int, optional): Thickness of the grid lines in pixels. Defaults to 1.
        active_color (tuple, optional): RGB color of a realized pairing. Defaults to (0, 100, 200).
        border_color (tuple, optional): RGB color of the background/grid lines. Defaults to white.
        color_scale (int, optional): Range of the grey shading. Defaults to 128.

    Returns:
        numpy.ndarray: (size, size, 3) uint8 RGB canvas, where size = N * cell_size + (N + 1) * border_size.
    """

    # Shorthand
    N = len(requests)
    if active_color is None:
        active_color = cardpairs.globals.matrix_colors["active"]
    if border_color is None:
        border_color = cardpairs.globals.matrix_colors["border"]
    active_color, border_color = check_color(active_color, "active"), check_color(border_color, "border")
    if cell_size < 1 or border_size < 0:
        raise MalformedInput("Cell size must be positive and border size non-negative.")

    # Fill the entire image with the border color (this creates the grid lines)
    image_size = canvas_size(N, cell_size, border_size)
    img = np.empty((image_size, image_size, 3), dtype=np.uint8)
    img[:, :] = border_color

    # Count how many pairings each row (sender) and column (receiver) has
    pairing_set = set()
    row_counts, col_counts = np.zeros(N, dtype=int), np.zeros(N, dtype=int)
    for i, j in pairings:
        if not (0 <= i < N and 0 <= j < N):
            raise MalformedInput("Pairing " + str((i, j)) + " references a participant outside 0.." + str(N - 1) + ".")
        pairing_set.add((i, j))
        row_counts[i] += 1
        col_counts[j] += 1

    # Maximum counts for normalization
    max_row_count = int(row_counts.max()) if N > 0 else 0
    max_col_count = int(col_counts.max()) if N > 0 else 0
    row_shades = [grey_shade(c, max_row_count, color_scale) for c in row_counts]
    col_shades = [grey_shade(c, max_col_count, color_scale) for c in col_counts]

    # Top-left to bottom-right diagonal: dx >= dy is the upper (column) triangle
    dy, dx = np.indices((cell_size, cell_size))
    upper = dx >= dy

    # Fill each cell
    for row in range(N):
        for col in range(N):
            if row == col:
                continue

            start_x, start_y = cell_origin(row, col, cell_size, border_size)
            cell = img[start_y:start_y + cell_size, start_x:start_x + cell_size]

            if (row, col) in pairing_set:
                cell[:, :] = active_color
            else:
                cell[upper] = (col_shades[col],) * 3
                cell[~upper] = (row_shades[row],) * 3

    return img


def save_solution_matrix(img, filepath, printing=False):
    """
    Saves the canvas as an image (format determined by the file extension). Errors from Pillow or the file system
    propagate as OSError.
    """
    try:
        Image.fromarray(np.ascontiguousarray(img, dtype=np.uint8)).save(filepath)
    except ValueError as error:  # Pillow raises ValueError for unknown extensions
        raise OSError("Could not save image to '" + str(filepath) + "': " + str(error)) from error

    if printing:
        print("Matrix visualization saved as: " + str(filepath))
    return filepath
