"""Structural transform used to move an interpolant onto another representation."""

from __future__ import annotations


def adapt(to, obj):
    """Apply *to* to *obj*, recursing through objects that know how to adapt.

    Objects with an ``adapt(to)`` method (interpolants, extrapolation
    policies) rebuild themselves from adapted fields; any other object is a
    leaf and is passed to *to* directly.

    Parameters
    ----------
    to : callable
        Leaf transform, e.g. ``np.asarray`` or a device-transfer function.
    obj : object
        Object to transform.

    Returns
    -------
    object
        The transformed object.

    Examples
    --------
    >>> import numpy as np
    >>> from pymultilinear import Interpolant
    >>> itp = Interpolant([0, 1], [0, 10])
    >>> adapt(np.asarray, itp).axes[0]
    array([0, 1])
    """
    method = getattr(obj, "adapt", None)
    if method is not None and callable(method):
        return method(to)
    return to(obj)
