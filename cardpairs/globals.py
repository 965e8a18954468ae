import os

# Folders & Paths (relative to the directory the problem is run from)
global dir_path
dir_path = os.getcwd() + "/"

global paths
paths = {"instances": dir_path + "instances/",
         "solvers": dir_path + "solvers/"}

# Colors used by the solution matrix (RGB)
global matrix_colors
matrix_colors = {"active": (0, 100, 200),  # Cell of a realized pairing
                 "border": (255, 255, 255)}  # Background and grid lines

# Labels for the participant metrics
global metric_label_dict
metric_label_dict = {"requests": "Requested Cards", "sent_count": "Cards Sent", "received_count": "Cards Received",
                     "fulfilled": "Request Fulfilled"}


def ensure_folder(folder_path, printing=False):
    """
    Creates the folder if it doesn't exist yet and returns the path
    :param folder_path: path to the folder
    :param printing: Whether the procedure should print something
    :return: folder path
    """

    # If we don't have the folder, we make one
    if not os.path.exists(folder_path):
        if printing:
            print("Folder '" + folder_path + "' not in current working directory. Creating it now...")
        os.makedirs(folder_path)

    return folder_path
