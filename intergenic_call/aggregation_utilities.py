"""
Aggregation of transcript abundances to genes, following the contract of tximport.

The aggregator is a port: run_tximport only decides which abundance file and
which mapping are handed to it and takes care of the temporary files created
on the way. PandasTximport is the default implementation; any object with an
`aggregate(request)` method can be used instead.

@Author: Luis Javier Madrigal-Roca & John K. Kelly

"""

import logging
import os
from dataclasses import dataclass

import numpy as np
import pandas as pd

from intergenic_call.exceptions import AggregationError, MissingAbundanceFileError
from intergenic_call.mapping_utilities import build_tx2gene, strip_tx_version
from intergenic_call.metadata_utilities import RunContext
from intergenic_call.normalization_utilities import normalize_intergenic_names, restore_intergenic_names


@dataclass
class TximportRequest:
    """Parameters of one aggregation."""
    abundance_file: str
    tx2gene: pd.DataFrame
    tool_name: str
    tx_out: bool
    ignore_tx_version: bool
    transcript_id_header: str
    count_header: str
    eff_length_header: str
    abundance_header: str
    sample_name: str = 'sample'

    @classmethod
    def from_metadata(cls, abundance_metadata, abundance_file, tx2gene, sample_name='sample'):
        return cls(abundance_file=abundance_file,
                   tx2gene=tx2gene,
                   tool_name=abundance_metadata.tool_name,
                   tx_out=abundance_metadata.tx_out,
                   ignore_tx_version=abundance_metadata.ignore_tx_version,
                   transcript_id_header=abundance_metadata.transcript_id_header,
                   count_header=abundance_metadata.count_header,
                   eff_length_header=abundance_metadata.eff_length_header,
                   abundance_header=abundance_metadata.abundance_header,
                   sample_name=sample_name)


@dataclass
class AggregationResult:
    """
    Aggregated abundance, counts and length matrices. Rows are genes (or
    transcripts when tx_out is set) and columns are samples.
    """
    abundance: pd.DataFrame
    counts: pd.DataFrame
    length: pd.DataFrame
    counts_from_abundance: str = 'no'

    def rename_index(self, function):
        return AggregationResult(abundance=function(self.abundance),
                                 counts=function(self.counts),
                                 length=function(self.length),
                                 counts_from_abundance=self.counts_from_abundance)

    def to_dataframe(self):
        """Single table with one abundance, counts and length column per sample."""
        frames = []
        for name, matrix in (('abundance', self.abundance), ('counts', self.counts), ('length', self.length)):
            frames.append(matrix.add_prefix(f"{name}_") if matrix.shape[1] > 1 else matrix.set_axis([name], axis=1))
        return pd.concat(frames, axis=1)


class Aggregator:
    """Interface of the abundance aggregators."""

    def aggregate(self, request):
        raise NotImplementedError


class PandasTximport(Aggregator):
    """
    Summarize a kallisto or Salmon abundance file to gene level.

    Counts and abundances of the transcripts of a gene are summed. The gene
    length is the average of the transcript lengths weighted by their
    abundance, or the plain average when the gene has no abundance at all.
    Transcripts missing from tx2gene are dropped.
    """

    def read_abundance(self, request):
        try:
            abundance = pd.read_csv(request.abundance_file, sep='\t',
                                    dtype={request.transcript_id_header: str})
        except Exception as e:
            logging.error(f"Error reading abundance file {request.abundance_file}: {e}")
            raise AggregationError(f"Cannot read abundance file {request.abundance_file}: {e}") from e

        headers = [request.transcript_id_header, request.abundance_header,
                   request.count_header, request.eff_length_header]
        missing = [h for h in headers if h not in abundance.columns]
        if missing:
            raise AggregationError(f"Columns {', '.join(missing)} are missing from {request.abundance_file} "
                                   f"(expected output of {request.tool_name})")

        transcripts = pd.DataFrame({
            'tx': abundance[request.transcript_id_header].astype(str),
            'abundance': abundance[request.abundance_header].astype(float),
            'counts': abundance[request.count_header].astype(float),
            'length': abundance[request.eff_length_header].astype(float)
        })
        if request.ignore_tx_version:
            transcripts['tx'] = strip_tx_version(transcripts['tx'])
        return transcripts

    def aggregate(self, request):
        transcripts = self.read_abundance(request)

        if request.tx_out:
            matrices = transcripts.set_index('tx')
            return self._result(matrices['abundance'], matrices['counts'], matrices['length'], request.sample_name)

        tx2gene = request.tx2gene.iloc[:, :2].copy()
        tx2gene.columns = ['TXNAME', 'GENEID']
        if request.ignore_tx_version:
            tx2gene['TXNAME'] = strip_tx_version(tx2gene['TXNAME'])
        tx2gene = tx2gene.drop_duplicates(subset=['TXNAME'])

        merged = transcripts.merge(tx2gene, left_on='tx', right_on='TXNAME', how='inner')
        if merged.empty:
            raise AggregationError("None of the transcripts in the quantification file are present "
                                   "in the first column of tx2gene")
        n_missing = len(transcripts) - len(merged)
        if n_missing:
            logging.info(f"Transcripts missing from tx2gene: {n_missing}")
        logging.debug(f"Summarizing {len(merged)} transcripts to gene level")

        grouped = merged.groupby('GENEID', sort=True)
        counts = grouped['counts'].sum()
        abundance = grouped['abundance'].sum()
        weighted_length = (merged['abundance'] * merged['length']).groupby(merged['GENEID']).sum()
        length = pd.Series(np.where(abundance > 0, weighted_length / abundance.where(abundance > 0, 1.0),
                                    grouped['length'].mean()),
                           index=abundance.index)
        return self._result(abundance, counts, length, request.sample_name)

    @staticmethod
    def _result(abundance, counts, length, sample_name):
        def as_matrix(series):
            matrix = series.to_frame(sample_name)
            matrix.index.name = None
            return matrix
        return AggregationResult(abundance=as_matrix(abundance), counts=as_matrix(counts),
                                 length=as_matrix(length))


def resolve_abundance_file(abundance_metadata, context, abundance_file=None):
    """
    Return the path of the abundance file to aggregate.

    Raises
    ------
    MissingAbundanceFileError
        If the file does not exist
    """
    if not abundance_file:
        abundance_file = context.abundance_path(abundance_metadata)
    if not os.path.isfile(abundance_file):
        raise MissingAbundanceFileError(f"Can not generate presence/absence calls. "
                                        f"Abundance file is missing: {abundance_file}.")
    return abundance_file


def aggregate_abundance(abundance_file, tx2gene, abundance_metadata, output_dir,
                        aggregator=None, sample_name='sample'):
    """
    Aggregate an abundance file with a tx2gene mapping.

    When intergenic names have to be normalized, a temporary copy of the
    abundance file is written in output_dir and removed once the aggregator
    returns, whether it succeeded or not.

    Returns
    -------
    AggregationResult
        Row names are the original (non normalized) names
    """
    aggregator = aggregator or PandasTximport()
    normalized = normalize_intergenic_names(tx2gene, abundance_file, output_dir,
                                            abundance_metadata.transcript_id_header,
                                            enabled=abundance_metadata.normalize_intergenic_names)
    request = TximportRequest.from_metadata(abundance_metadata, normalized.abundance_file,
                                            normalized.tx2gene, sample_name=sample_name)
    try:
        result = aggregator.aggregate(request)
    finally:
        if normalized.is_temporary and os.path.exists(normalized.abundance_file):
            os.remove(normalized.abundance_file)

    return result.rename_index(lambda matrix: restore_intergenic_names(matrix, normalized.normalization_map))


def run_tximport(abundance_metadata, user_metadata, context=None, abundance_file=None, aggregator=None,
                 **tx2gene_kwargs):
    """
    Run tximport. Abundances are summarized from transcript to gene level unless
    `abundance_metadata.tx_out` is True.

    Parameters
    ----------
    abundance_metadata : AbundanceMetadata
        Tool and aggregation settings
    user_metadata : UserMetadata
        Species, annotation and library settings
    context : RunContext, optional
        Directories of the run. Deduced from the metadata when None.
    abundance_file : str, optional
        Path to the abundance file. Deduced from the context when None.
    aggregator : Aggregator, optional
        Aggregator to use (default: PandasTximport)
    **tx2gene_kwargs
        Passed to the tx2gene builder

    Returns
    -------
    AggregationResult
    """
    context = context or RunContext.from_metadata(abundance_metadata, user_metadata)
    abundance_file = resolve_abundance_file(abundance_metadata, context, abundance_file)
    tx2gene = build_tx2gene(abundance_metadata, user_metadata, context, **tx2gene_kwargs)

    logging.info(f"Running tximport on {abundance_file} ({abundance_metadata.tool_name}, "
                 f"txOut={abundance_metadata.tx_out}, ignoreTxVersion={abundance_metadata.ignore_tx_version})")
    return aggregate_abundance(abundance_file, tx2gene, abundance_metadata, context.output_dir,
                               aggregator=aggregator, sample_name=user_metadata.library_name)


def write_aggregation_result(result, output_file):
    """Write an AggregationResult as a tab separated table."""
    table = result.to_dataframe()
    table.index.name = 'id'
    table.to_csv(output_file, sep='\t')
    logging.info(f"Wrote {len(table)} rows to {output_file}")
