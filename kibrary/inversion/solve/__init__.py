r"""
==================================================
Inversion Solvers (:mod:`kibrary.inversion.solve`)
==================================================

Solvers of the normal equations :math:`{\bf A}^T {\bf A} \cdot {\bf m} =
{\bf A}^T \cdot {\bf d}`. All of them take :math:`{\bf A}^T {\bf A}` and
:math:`{\bf A}^T {\bf d}` as inputs, which are never modified, and produce a
list of candidate solutions (answers):

- :class:`ConjugateGradientMethod`: one answer per iteration;
- :class:`LeastSquaresMethod`: one answer per damping parameter;
- :class:`SingularValueDecomposition`: one answer per eigenvector;
- :class:`NonNegativeLeastSquaresMethod`: a single non-negative answer;
- :class:`BiCGStabMethod`: one answer per iteration.

The solver can be chosen by name through :func:`construct`.

"""
from .methods import *
from .base import *
from .conjugate_gradient import *
from .least_squares import *
from .svd import *
from .nnls import *
from .bicgstab import *
