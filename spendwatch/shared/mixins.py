"""
Mixins shared by pipeline components.
"""

import pandas as pd


class TransformableMixin:
    """
    Adds stage-based transformer support to a component.

    The component is expected to expose a ``transformers`` attribute shaped
    like ``{'before': [...], 'after': [...]}``. Each transformer is either an
    object with a ``.filter()`` or ``.format()`` method, or a plain callable
    taking and returning a DataFrame.
    """

    def _apply_transformers(self, df: pd.DataFrame, stage: str) -> pd.DataFrame:
        """
        Apply transformers for a specific stage.

        Args:
            df: DataFrame to transform
            stage: Stage name ('before' or 'after')

        Returns:
            pd.DataFrame: Transformed DataFrame

        Raises:
            TypeError: If a transformer is neither a filter, a formatter nor callable
        """
        transformers = getattr(self, "transformers", None) or {}
        if stage not in transformers:
            return df

        result = df
        for transformer in transformers[stage]:
            if hasattr(transformer, "filter"):
                result = transformer.filter(result)
            elif hasattr(transformer, "format"):
                result = transformer.format(result)
            elif callable(transformer):
                result = transformer(result)
            else:
                raise TypeError(
                    f"Transformer must have .filter(), .format() method or be callable, "
                    f"got {type(transformer).__name__}"
                )

        return result
