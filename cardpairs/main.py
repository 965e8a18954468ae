# Import libraries
import copy
import numpy as np

# cardpairs modules
import cardpairs.globals
import cardpairs.data.requests
import cardpairs.data.support
import cardpairs.solutions.handling
import cardpairs.solutions.optimization
import cardpairs.visualizations.charts
import cardpairs.visualizations.matrix


# Main Problem Class
class CardExchangeProblem:
    def __init__(self, requests, data_name="Pairings", sort_requests=False, printing=True):
        """
        Represents the card exchange pairing problem object.

        Parameters:
            requests (sequence): Number of cards each participant wants to send. Participant i is index i (after
                                 sorting, if requested).
            data_name (str): Name of the problem instance. Used for the export folder. Defaults to "Pairings".
            sort_requests (bool): Sort the participants by their request in ascending order. Defaults to False.
            printing (bool): Whether the methods should print status updates. Defaults to True.

        Raises:
            MalformedInput: If a request isn't a non-negative integer.

        Example:
            instance = CardExchangeProblem([1, 1, 2, 2, 3])
            instance.solve_pyomo_model()
            instance.report()
            instance.visualize_solution_matrix()
        """

        self.data_name, self.printing = data_name, printing

        # Fixed parameters (validates the requests)
        self.parameters = cardpairs.data.requests.build_parameters(requests, sort_requests=sort_requests)

        # Initialize "functional" parameters
        self.mdl_p = cardpairs.data.support.initialize_instance_functional_parameters(self.parameters["N"])

        # Solutions
        self.solution, self.solution_name, self.solutions = None, None, None

        # Where to export things
        root = cardpairs.globals.paths['instances'] + self.data_name + "/"
        self.export_paths = {"Analysis & Results": root, "charts": root + "Charts/"}

        if self.printing:
            print("Instance '" + self.data_name + "' initialized with " + str(self.parameters['N']) + " participants.")

    # Method helper functions
    def reset_functional_parameters(self, p_dict={}):
        """
        Resets the instance functional parameters and updates them with the new values from p_dict.

        If a parameter specified in p_dict does not exist in self.mdl_p, a warning message is printed.

        Example usage:
            instance = CardExchangeProblem([2, 2, 2])
            instance.reset_functional_parameters({'solver_name': 'cbc', 'pyomo_max_time': 30})
        """

        # Reset plot parameters and model parameters
        self.mdl_p = cardpairs.data.support.initialize_instance_functional_parameters(self.parameters["N"])

        # Update plot parameters and model parameters
        for key in p_dict:

            if key in self.mdl_p:
                self.mdl_p[key] = p_dict[key]
            else:
                print("WARNING. Specified parameter '" + str(key) + "' does not exist.")

    def error_checking(self, test="None"):
        """
        This method is here to test different conditions and raise errors where conditions are not met.
        """

        if test == "Solution":
            if self.solution is None:
                raise ValueError("No solution activated. Solve the problem (or set a solution) first.")

    def solution_handling(self, solution, printing=None):
        """
        Determines what to do with the generated solution. This is a "helper method" and not intended to be called
        directly by the user.

        The solution is evaluated (pairings decoded, metrics calculated), given a unique name, and added to the
        solutions dictionary unless an identical set of pairings is already in there.
        """

        if printing is None:
            printing = self.printing

        # Set the solution attribute to the instance (and calculate additional components)
        solution = cardpairs.solutions.handling.evaluate_solution(
            solution, self.parameters, threshold=self.mdl_p['decode_threshold'], printing=printing)

        if not self.mdl_p['add_to_dict']:
            if self.mdl_p['set_to_instance']:
                self.solution, self.solution_name = solution, solution['method']
                self.solution['name'] = self.solution_name
            return

        # Initialize solutions dictionary if necessary
        if self.solutions is None:
            self.solutions = {}

        # Check if this solution is a new solution
        for s_name in self.solutions:
            p_i = cardpairs.solutions.handling.compare_solutions(self.solutions[s_name]['pairings'],
                                                                 solution['pairings'])

            # Set the name of this solution to be the name of its equivalent that is already in the dictionary
            if p_i == 1:
                solution['name'] = s_name
                if self.mdl_p['set_to_instance']:
                    self.solution, self.solution_name = solution, s_name
                return

        # Determine solution name
        if solution['method'] not in self.solutions:
            solution_name = solution['method']
        else:
            count = 2
            solution_name = solution['method'] + '_' + str(count)
            while solution_name in self.solutions:
                count += 1
                solution_name = solution['method'] + '_' + str(count)

        # Add it to the dictionary
        solution['name'] = solution_name
        self.solutions[solution_name] = copy.deepcopy(solution)
        if self.mdl_p['set_to_instance']:
            self.solution, self.solution_name = solution, solution_name

    def set_solution(self, solution_name=None, printing=None):
        """
        Activates one of the solutions in the solutions dictionary (the first one if no name is given)
        """
        if printing is None:
            printing = self.printing

        if self.solutions is None or len(self.solutions) == 0:
            raise ValueError("No solutions to set.")

        if solution_name is None:
            solution_name = list(self.solutions.keys())[0]
        elif solution_name not in self.solutions:
            raise ValueError("Solution '" + str(solution_name) + "' not in solutions dictionary: " +
                             str(list(self.solutions.keys())))

        self.solution_name = solution_name
        self.solution = copy.deepcopy(self.solutions[solution_name])

        if printing:
            print("Solution '" + solution_name + "' activated.")

    def add_solution(self, pairings, method="Added", printing=None):
        """
        Adds a solution given directly as (sender, receiver) pairs. The pairings are checked but not rejected if they
        break a constraint; the failures are listed under "failed_constraints".
        """
        solution = {"method": method, "pairings": tuple(pairings)}
        self.solution_handling(solution, printing=printing)
        return self.solution

    # Solving
    def solve_pyomo_model(self, p_dict={}, printing=None):
        """
        Build the card exchange pairing model, solve it, and decode the pairings.

        Parameters:
            p_dict (dict, optional): Functional parameter overrides (e.g. {'solver_name': 'cbc', 'pyomo_max_time': 60}).
            printing (bool, optional): Whether to print status updates. Defaults to the instance setting.

        Returns:
            dict: The evaluated solution.

        Raises:
            InfeasibleModel: If the solver reports the model as infeasible (it never should).
            SolverError: If the solver is unavailable, fails, or returns no usable assignment.
        """

        # Reset instance model parameters
        self.reset_functional_parameters(p_dict)
        if printing is None:
            printing = self.printing

        # Build the model and then solve it
        model = cardpairs.solutions.optimization.pairing_model_build(self.parameters, printing=printing)
        solution = cardpairs.solutions.optimization.solve_pyomo_model(model, self.parameters, self.mdl_p,
                                                                      printing=printing)

        # Determine what to do with the solution
        self.solution_handling(solution, printing=printing)

        # Return the solution
        return self.solution

    # Reporting
    def report(self, printing=None, filepath=None):
        """
        Returns the text report of the activated solution: each participant's requested cards against the cards
        actually sent and received (and with whom), then the totals. Optionally writes it to a text file.
        """
        self.error_checking("Solution")
        if printing is None:
            printing = self.printing

        text = cardpairs.solutions.handling.solution_report(self.solution, self.parameters)

        if printing:
            print(text)

        if filepath is not None:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(text + "\n")

        return text

    def export_solution(self, filepath=None, printing=None):
        """
        Exports the per-participant metrics of the activated solution to a csv file
        """
        self.error_checking("Solution")
        if printing is None:
            printing = self.printing

        if filepath is None:
            folder = cardpairs.globals.ensure_folder(self.export_paths["Analysis & Results"], printing=printing)
            filepath = folder + self.data_name + " " + self.solution_name + " Participants.csv"

        df = cardpairs.solutions.handling.participant_dataframe(self.solution, self.parameters)
        df.to_csv(filepath, index=False)

        if printing:
            print("Exported participant metrics to", filepath)

        return df

    # Visualizations
    def visualize_solution_matrix(self, p_dict={}, printing=None, filepath=None):
        """
        Renders the solution matrix of the activated solution (see `cardpairs.visualizations.matrix`) and saves it as
        an image if "save" is on.

        A failure to write the image is printed and re-raised as OSError. The solution itself is not affected.

        Returns:
            numpy.ndarray: The RGB canvas.
        """
        self.error_checking("Solution")
        self.reset_functional_parameters(p_dict)
        if printing is None:
            printing = self.printing

        ip = self.mdl_p
        img = cardpairs.visualizations.matrix.render_solution_matrix(
            self.solution['pairings'], self.parameters['requests'], cell_size=ip['cell_size'],
            border_size=ip['border_size'], active_color=ip['active_color'], border_color=ip['border_color'],
            color_scale=ip['color_scale'])

        if ip['save'] or filepath is not None:
            if filepath is None:
                folder = cardpairs.globals.ensure_folder(self.export_paths["Analysis & Results"], printing=printing)
                filename = ip['filename'] if ip['filename'] is not None else "solution.png"
                filepath = folder + filename

            try:
                cardpairs.visualizations.matrix.save_solution_matrix(img, filepath, printing=printing)
            except OSError as error:
                print("Failed to create visualization: " + str(error))
                raise

        return img

    def display_activity_chart(self, p_dict={}, printing=None):
        """
        Builds the requested/sent/received bar chart for the activated solution
        """
        self.error_checking("Solution")
        self.reset_functional_parameters(p_dict)
        if printing is None:
            printing = self.printing

        chart = cardpairs.visualizations.charts.ActivityChart(self)
        return chart.build(printing=printing)

    def participant_summary(self):
        """Counts of participants whose requests were fully met, partially met, or not met at all"""
        self.error_checking("Solution")
        sent, requests = self.solution['sent_count'], self.parameters['requests']
        return {"fulfilled": int(np.sum(sent == requests)),
                "partial": int(np.sum((sent > 0) & (sent < requests))),
                "unmatched": int(np.sum((sent == 0) & (requests > 0)))}
