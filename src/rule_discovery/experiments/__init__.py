from .run_ecommerce_mining import run_experiment

__all__ = ['run_experiment']
