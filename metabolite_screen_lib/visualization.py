"""
Visualization Module

Distribution plots, box plots, volcano plot and classifier scores for
metabolite screening results.
"""

import math
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from .classification import ClassificationResult
from .utils import standardize_features


def _long_format(matrix: pd.DataFrame, labels: Sequence, features: List[str],
                 class_a: str, class_b: str) -> pd.DataFrame:
    """Melt selected features to (class, feature, value) rows for seaborn."""
    df = matrix[features].reset_index(drop=True).copy()
    df['class'] = list(labels)
    df = df[df['class'].isin([class_a, class_b])]
    return df.melt(id_vars='class', var_name='feature', value_name='value').dropna(subset=['value'])


class ScreeningVisualization:
    """
    Plots for the exploratory metabolite analysis.

    All plot methods return the Figure; when save_path is given the figure is
    written as PNG (save_path without extension) and closed.
    """

    def __init__(self,
                 class_a: str = 'cachexic',
                 class_b: str = 'control',
                 class_a_color: str = '#FF5252',
                 class_b_color: str = '#2196F3'):
        self.class_a = class_a
        self.class_b = class_b
        self.palette = {class_a: class_a_color, class_b: class_b_color}

    def plot_distributions(self,
                           matrix: pd.DataFrame,
                           labels: Sequence,
                           features: List[str] = None,
                           n_cols: int = 4,
                           figsize: Tuple[int, int] = (16, 12),
                           save_path: str = None) -> plt.Figure:
        """Histogram + KDE per feature, colored by class."""
        features = list(features if features is not None else matrix.columns)
        long_df = _long_format(matrix, labels, features, self.class_a, self.class_b)

        n_rows = max(1, math.ceil(len(features) / n_cols))
        fig, axes = plt.subplots(n_rows, n_cols, figsize=figsize, squeeze=False)
        sns.set_style("whitegrid")

        for ax, feat in zip(axes.flat, features):
            sub = long_df[long_df['feature'] == feat]
            if sub.empty:
                ax.set_visible(False)
                continue
            sns.histplot(data=sub, x='value', hue='class', palette=self.palette,
                         kde=sub['value'].nunique() > 1, stat='density', common_norm=False,
                         element='step', ax=ax)
            ax.set_title(str(feat), fontsize=9, weight='bold')
            ax.set_xlabel('')

        for ax in list(axes.flat)[len(features):]:
            ax.set_visible(False)

        fig.suptitle('Metabolite concentration distributions', weight='bold')
        plt.tight_layout()
        return self._finish(fig, save_path)

    def plot_boxplots(self,
                      matrix: pd.DataFrame,
                      labels: Sequence,
                      features: List[str],
                      figsize: Tuple[int, int] = (16, 8),
                      standardize: bool = False,
                      save_path: str = None) -> plt.Figure:
        """
        Side-by-side box plots per feature with the individual points overlaid.

        standardize z-scores each feature first, so metabolites with very
        different concentration ranges share one axis.
        """
        fig, ax = plt.subplots(figsize=figsize)
        if not features:
            ax.text(0.5, 0.5, 'No significant features', ha='center', va='center',
                    transform=ax.transAxes)
            ax.axis('off')
            return self._finish(fig, save_path)

        if standardize:
            matrix = standardize_features(matrix, columns=list(features))

        long_df = _long_format(matrix, labels, list(features), self.class_a, self.class_b)
        order = [self.class_a, self.class_b]
        sns.boxplot(data=long_df, x='feature', y='value', hue='class', hue_order=order,
                    palette=self.palette, showfliers=False, ax=ax)
        sns.stripplot(data=long_df, x='feature', y='value', hue='class', hue_order=order,
                      palette=self.palette, dodge=True, size=3, alpha=0.6,
                      edgecolor='dimgrey', linewidth=0.5, legend=False, ax=ax)

        ax.set_xlabel('')
        ax.set_ylabel('z-score' if standardize else 'Concentration', fontsize=12)
        ax.tick_params(axis='x', rotation=45)
        ax.set_title(f'Significant metabolites: {self.class_a} vs {self.class_b}', weight='bold')
        plt.tight_layout()
        return self._finish(fig, save_path)

    def plot_volcano(self,
                     results: pd.DataFrame,
                     alpha: float = 0.05,
                     figsize: Tuple[int, int] = (12, 9),
                     labels_fontsize: int = 8,
                     title: str = None,
                     save_path: str = None) -> plt.Figure:
        """
        Mean difference vs -log10(raw p).

        The dashed line is the raw p-value equivalent of the Bonferroni cut,
        alpha / number of features.
        """
        n_features = len(results)
        computable = results[results['status'] == 'ok']

        fig, ax = plt.subplots(figsize=figsize)
        sns.set_style("whitegrid")

        up = computable['is_significant'] & (computable['mean_difference'] > 0)
        down = computable['is_significant'] & (computable['mean_difference'] < 0)
        for mask, color, label in [
            (~computable['is_significant'], 'grey', 'Not significant'),
            (up, self.palette[self.class_a], f'Higher in {self.class_a} (n={int(up.sum())})'),
            (down, self.palette[self.class_b], f'Higher in {self.class_b} (n={int(down.sum())})'),
        ]:
            sub = computable[mask]
            if not sub.empty:
                ax.scatter(sub['mean_difference'], sub['-log10_p'], s=60, alpha=0.9,
                           color=color, edgecolor='dimgrey', linewidth=0.8, label=label)

        for _, r in computable[computable['is_significant']].iterrows():
            ax.annotate(r['feature_name'], (r['mean_difference'], r['-log10_p']),
                        fontsize=labels_fontsize, weight='bold')

        if n_features:
            ax.axhline(-np.log10(alpha / n_features), ls='--', c='dimgrey', lw=1,
                       label=f'Bonferroni threshold (alpha={alpha})')
        ax.axvline(0, ls='-', c='lightgrey', lw=1)

        ax.set_xlabel(f'Mean difference ({self.class_a} - {self.class_b})', fontsize=12)
        ax.set_ylabel(r'$-\log_{10}$(p)', fontsize=12)
        plot_title = (title or 'Differential abundance: {label_a} vs {label_b} (n features={n})').format(
            label_a=self.class_a, label_b=self.class_b, n=n_features
        )
        ax.set_title(plot_title, weight='bold')
        ax.legend(loc='upper left', frameon=True, framealpha=0.85)
        plt.tight_layout()
        return self._finish(fig, save_path)

    def plot_classifier_scores(self,
                               classification_results: Dict[str, ClassificationResult],
                               figsize: Tuple[int, int] = (8, 6),
                               save_path: str = None) -> plt.Figure:
        """Bar chart of mean CV accuracy per model, fold scores as points."""
        fig, ax = plt.subplots(figsize=figsize)
        names = list(classification_results.keys())
        means = [classification_results[n].mean_accuracy for n in names]
        stds = [classification_results[n].std_accuracy for n in names]

        ax.bar(names, means, yerr=stds, capsize=6, color='#90CAF9', edgecolor='black')
        for i, name in enumerate(names):
            folds = classification_results[name].fold_accuracy
            ax.scatter([i] * len(folds), folds, color='black', s=15, zorder=3)
            ax.text(i, means[i] + stds[i] + 0.02, f'{means[i]:.2f}', ha='center', fontsize=10)

        ax.axhline(0.5, ls='--', c='dimgrey', lw=1, label='Chance')
        ax.set_ylim(0, 1.1)
        ax.set_ylabel('Cross-validated accuracy', fontsize=12)
        ax.set_title('Classifier performance', weight='bold')
        ax.legend(loc='lower right')
        plt.tight_layout()
        return self._finish(fig, save_path)

    @staticmethod
    def _finish(fig: plt.Figure, save_path: str = None) -> plt.Figure:
        if save_path:
            fig.savefig(f"{save_path}.png", dpi=300, bbox_inches='tight')
            plt.close(fig)
        return fig
