"""
Domain errors raised by the pricing engine and the persistence adapter.

Validation errors carry a user-facing message naming the violated rule.
PersistenceFailure carries only a generic message; the cause is logged.
"""


class QuotationError(Exception):
    """Base class for all quotation errors."""


class ValidationError(QuotationError):
    """Input rejected before any computation or persistence."""


class EmptyAllocation(ValidationError):
    def __init__(self):
        super().__init__("Debe agregar al menos una materia prima")


class UnresolvedMaterial(ValidationError):
    def __init__(self, material_id):
        self.material_id = material_id
        if material_id is None:
            message = "Hay una materia prima sin seleccionar"
        else:
            message = f"La materia prima {material_id} no existe"
        super().__init__(message)


class PercentageMismatch(ValidationError):
    def __init__(self, actual_sum: float):
        self.actual_sum = actual_sum
        super().__init__(
            f"La suma de los porcentajes debe ser 100% (actual: {actual_sum:g}%)"
        )


class InvalidMargin(ValidationError):
    def __init__(self, margin_percentage: float):
        self.margin_percentage = margin_percentage
        super().__init__(
            f"El margen debe estar entre 0% y menos de 100% (recibido: {margin_percentage:g}%)"
        )


class PersistenceFailure(QuotationError):
    def __init__(self, message: str = "No se pudo guardar la cotización"):
        super().__init__(message)
