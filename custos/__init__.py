"""Dashboard de Custos - expense tracking with monthly KPIs."""

__version__ = "0.1.0"
