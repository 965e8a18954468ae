import matplotlib.pyplot as plt
from matplotlib.patches import Patch
import numpy as np
import copy

# cardpairs modules
import cardpairs.globals


class ActivityChart:
    def __init__(self, instance):
        """
        Chart of the requested, sent, and received cards for each participant (participants on the x-axis). The
        instance must already have an evaluated solution.
        """

        # Load attributes
        self.parameters = instance.parameters
        self.ip = instance.mdl_p  # "instance plot parameters"
        self.solution, self.solution_name = instance.solution, instance.solution_name
        self.export_paths = instance.export_paths

        # Initialize the matplotlib figure/axes
        self.fig, self.ax = plt.subplots(figsize=self.ip['figsize'], facecolor=self.ip['facecolor'], tight_layout=True,
                                         dpi=self.ip['dpi'])

        # Label dictionary for participant metrics
        self.label_dict = copy.deepcopy(cardpairs.globals.metric_label_dict)

    def build(self, printing=True):
        """
        Builds the chart and saves it if specified
        """

        # Shorthand
        p, ip = self.parameters, self.ip
        x = np.arange(p['N'])
        w = ip['bar_width']

        # Bars: requested, sent, received
        legend_elements = []
        for offset, key in zip([-w, 0, w], ['requests', 'sent_count', 'received_count']):
            if key == 'requests':
                heights = p['requests']
            else:
                heights = self.solution[key]
            self.ax.bar(x + offset, heights, width=w, color=ip['bar_colors'][key], edgecolor='black')
            legend_elements.append(Patch(facecolor=ip['bar_colors'][key], label=self.label_dict[key],
                                         edgecolor='black'))

        # Axes
        self.ax.set_xticks(x)
        self.ax.set_xticklabels([str(i) for i in x], fontsize=ip['tick_size'])
        self.ax.tick_params(axis='y', labelsize=ip['tick_size'])
        self.ax.set_xlabel('Participant', fontsize=ip['label_size'])
        self.ax.set_ylabel('Number of Cards', fontsize=ip['label_size'])
        y_max = max([1] + [int(v) for v in p['requests']] + [int(v) for v in self.solution['sent_count']])
        self.ax.set_ylim(0, y_max * 1.15)
        self.ax.yaxis.get_major_locator().set_params(integer=True)
        self.ax.legend(handles=legend_elements, loc=ip['legend_loc'], fontsize=ip['legend_size'])

        # Title
        if ip['title'] is None:
            ip['title'] = 'Card Activity (' + self.solution_name + ', ' + str(self.solution['num_pairings']) + \
                          ' pairings)'
        if ip['display_title']:
            self.ax.set_title(ip['title'], fontsize=ip['title_size'])

        # Save the chart
        if ip['save']:
            if ip['filename'] is None:
                ip['filename'] = self.solution_name + ' Activity Chart.png'
            folder = cardpairs.globals.ensure_folder(self.export_paths['charts'], printing=printing)
            filepath = folder + ip['filename']
            self.fig.savefig(filepath)
            if printing:
                print("Saved chart to", filepath)

        return self.fig
