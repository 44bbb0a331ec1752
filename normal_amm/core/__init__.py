"""normal_amm.core — result type, error values, fixed-point boundary."""

from normal_amm.core.errors import (
    DomainError as DomainError,
)
from normal_amm.core.errors import (
    FieldViolation as FieldViolation,
)
from normal_amm.core.errors import (
    InvalidBracketError as InvalidBracketError,
)
from normal_amm.core.errors import (
    NonConvergenceError as NonConvergenceError,
)
from normal_amm.core.errors import (
    ReferenceEvaluationError as ReferenceEvaluationError,
)
from normal_amm.core.errors import (
    SolverError as SolverError,
)
from normal_amm.core.errors import (
    domain_err as domain_err,
)
from normal_amm.core.fixed_point import (
    WAD as WAD,
)
from normal_amm.core.fixed_point import (
    basis_points_to_float as basis_points_to_float,
)
from normal_amm.core.fixed_point import (
    float_to_wad as float_to_wad,
)
from normal_amm.core.fixed_point import (
    wad_to_float as wad_to_float,
)
from normal_amm.core.result import (
    Err as Err,
)
from normal_amm.core.result import (
    Ok as Ok,
)
from normal_amm.core.result import (
    Result as Result,
)
from normal_amm.core.result import (
    sequence as sequence,
)
from normal_amm.core.result import (
    unwrap as unwrap,
)
