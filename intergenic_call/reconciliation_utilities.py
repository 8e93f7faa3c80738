"""
Set of functions to compute abundances once intergenic regions are removed

TPM values written by the quantification tool are normalized over all
targets, intergenic regions included. After removing the intergenic regions
they have to be computed again so that they still sum to one million.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

import logging
import os

import numpy as np
import pandas as pd

from intergenic_call.aggregation_utilities import PandasTximport, TximportRequest, resolve_abundance_file
from intergenic_call.intergenic_utilities import get_intergenic_ids
from intergenic_call.mapping_utilities import build_tx2gene
from intergenic_call.metadata_utilities import RunContext

ABUNDANCE_WITHOUT_INTERGENIC_FILE = 'abundance_without_intergenic.tsv'


def count_to_tpm(counts, eff_lengths):
    """
    Compute TPM values from counts and effective lengths.

    Parameters
    ----------
    counts : array-like
        Estimated counts
    eff_lengths : array-like
        Effective lengths. Targets with a non positive length get a TPM of 0.

    Returns
    -------
    np.ndarray
        TPM values. All of them are 0 when there is no count at all.
    """
    counts = np.asarray(counts, dtype=float)
    eff_lengths = np.asarray(eff_lengths, dtype=float)
    rate = np.divide(counts, eff_lengths, out=np.zeros_like(counts), where=eff_lengths > 0)
    total = rate.sum()
    if total == 0:
        return np.zeros_like(rate)
    return rate / total * 1e6


def intergenic_ids_from_tx2gene(tx2gene):
    """Names of the rows of tx2gene where transcript and gene are identical."""
    return tx2gene.loc[tx2gene['TXNAME'] == tx2gene['GENEID'], 'TXNAME'].tolist()


def remove_intergenic_from_tx2gene(tx2gene, intergenic_ids):
    """Return tx2gene without the rows of intergenic regions."""
    return tx2gene[~tx2gene['TXNAME'].isin(set(intergenic_ids))].reset_index(drop=True)


def exclude_intergenic(abundance, tx2gene, intergenic_ids, abundance_metadata):
    """
    Remove intergenic regions from an abundance table and compute TPM values
    again over the remaining targets.

    Parameters
    ----------
    abundance : pd.DataFrame
        Abundance table as written by the quantification tool
    tx2gene : pd.DataFrame
        Mapping with TXNAME and GENEID columns. Used to find the intergenic
        regions when intergenic_ids is None.
    intergenic_ids : list or None
        Intergenic region ids
    abundance_metadata : AbundanceMetadata
        Provides the names of the columns of the abundance table

    Returns
    -------
    pd.DataFrame
        New abundance table. The input table is not modified.
    """
    if intergenic_ids is None:
        intergenic_ids = intergenic_ids_from_tx2gene(tx2gene)

    id_header = abundance_metadata.transcript_id_header
    is_intergenic = abundance[id_header].astype(str).isin(set(intergenic_ids))
    without_intergenic = abundance.loc[~is_intergenic].copy()
    logging.info(f"Removed {int(is_intergenic.sum())} intergenic regions, {len(without_intergenic)} targets left")

    without_intergenic[abundance_metadata.abundance_header] = count_to_tpm(
        without_intergenic[abundance_metadata.count_header],
        without_intergenic[abundance_metadata.eff_length_header])
    return without_intergenic.reset_index(drop=True)


def abundance_without_intergenic(abundance_metadata, user_metadata, context=None, abundance_file=None, aggregator=None,
                                 intergenic_source=get_intergenic_ids, **tx2gene_kwargs):
    """
    Aggregate abundances of the library without the intergenic regions.

    A corrected abundance file is written in the output directory of the run,
    aggregated with a tx2gene mapping without intergenic regions, and removed
    afterwards.

    Parameters
    ----------
    abundance_file : str, optional
        Path to the abundance file. Deduced from the context when None.

    Returns
    -------
    AggregationResult
    """
    context = context or RunContext.from_metadata(abundance_metadata, user_metadata)
    aggregator = aggregator or PandasTximport()

    abundance_file = resolve_abundance_file(abundance_metadata, context, abundance_file)
    tx2gene = build_tx2gene(abundance_metadata, user_metadata, context,
                            intergenic_source=intergenic_source, **tx2gene_kwargs)
    intergenic_ids = intergenic_source(user_metadata)
    tx2gene_without_intergenic = remove_intergenic_from_tx2gene(tx2gene, intergenic_ids)

    abundance = pd.read_csv(abundance_file, sep='\t', dtype={abundance_metadata.transcript_id_header: str},
                            keep_default_na=False)
    corrected = exclude_intergenic(abundance, tx2gene, intergenic_ids, abundance_metadata)

    os.makedirs(context.output_dir, exist_ok=True)
    corrected_file = os.path.join(context.output_dir, ABUNDANCE_WITHOUT_INTERGENIC_FILE)
    corrected.to_csv(corrected_file, sep='\t', index=False)

    request = TximportRequest.from_metadata(abundance_metadata, corrected_file, tx2gene_without_intergenic,
                                            sample_name=user_metadata.library_name)
    try:
        return aggregator.aggregate(request)
    finally:
        if os.path.exists(corrected_file):
            os.remove(corrected_file)
