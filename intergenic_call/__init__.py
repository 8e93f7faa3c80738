"""
Utilities to reconcile transcript-level quantification with a gene annotation
that includes intergenic background regions.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

__version__ = '1.0.0'
