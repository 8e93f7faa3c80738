import os

import pandas as pd
import pytest

from intergenic_call.aggregation_utilities import AggregationResult
from intergenic_call.metadata_utilities import KallistoMetadata, RunContext, UserMetadata

GTF_LINES = [
    ['chr1', 'test', 'gene', '1', '400', '.', '+', '.', 'gene_id "GENE1";'],
    ['chr1', 'test', 'transcript', '1', '100', '.', '+', '.', 'gene_id "GENE1"; transcript_id "ENST1.2";'],
    ['chr1', 'test', 'exon', '1', '100', '.', '+', '.', 'gene_id "GENE1"; transcript_id "ENST1.2"; exon_number "1";'],
    ['chr1', 'test', 'transcript', '200', '400', '.', '+', '.', 'gene_id "GENE1"; transcript_id "ENST2.1";'],
    ['chr1', 'test', 'exon', '200', '400', '.', '+', '.', 'gene_id "GENE1"; transcript_id "ENST2.1"; exon_number "1";'],
    ['chr2', 'test', 'transcript', '1', '300', '.', '-', '.', 'gene_id "GENE2"; transcript_id "ENST3.1";'],
    ['chr2', 'test', 'exon', '1', '300', '.', '-', '.', 'gene_id "GENE2"; transcript_id "ENST3.1"; exon_number "1";'],
]

INTERGENIC_IDS = ['chrA.1_100_200', 'chrA.1_300_400', 'chr2_500_900']

ABUNDANCE_HEADER = ['target_id', 'length', 'eff_length', 'est_counts', 'tpm']
ABUNDANCE_ROWS = [
    ['ENST1.2', '100', '80', '40', '100000'],
    ['ENST2.1', '200', '160', '40', '50000'],
    ['ENST3.1', '300', '240', '120', '200000'],
    ['chrA.1_100_200', '100', '50', '10', '80000'],
    ['chrA.1_300_400', '100', '50', '20', '160000'],
    ['chr2_500_900', '400', '300', '0', '0'],
]


def write_tsv(path, header, rows):
    with open(path, 'w') as out:
        if header:
            out.write('\t'.join(header) + '\n')
        for row in rows:
            out.write('\t'.join(row) + '\n')
    return str(path)


@pytest.fixture
def gtf_file(tmp_path):
    path = tmp_path / 'annotation.gtf'
    with open(path, 'w') as out:
        out.write('#!genome-build test\n')
        for line in GTF_LINES:
            out.write('\t'.join(line) + '\n')
    return str(path)


@pytest.fixture
def intergenic_fasta(tmp_path):
    path = tmp_path / 'ref_intergenic.fa'
    with open(path, 'w') as out:
        for name in INTERGENIC_IDS:
            out.write(f'>{name}\nACGTACGTAC\n')
    return str(path)


@pytest.fixture
def user_metadata(tmp_path, gtf_file, intergenic_fasta):
    return UserMetadata(species_id='6239',
                        annotation_file=gtf_file,
                        intergenic_file=intergenic_fasta,
                        rnaseq_lib_path=str(tmp_path / 'SRX099901'),
                        working_path=str(tmp_path / 'work'))


@pytest.fixture
def context(user_metadata):
    return RunContext.from_metadata(KallistoMetadata(), user_metadata)


@pytest.fixture
def abundance_file(context):
    os.makedirs(context.output_dir, exist_ok=True)
    return write_tsv(os.path.join(context.output_dir, 'abundance.tsv'), ABUNDANCE_HEADER, ABUNDANCE_ROWS)


class RecordingAggregator:
    """Aggregator double keeping the requests it receives."""

    def __init__(self, result=None, error=None):
        self.requests = []
        self.files_seen = []
        self.result = result if result is not None else AggregationResult(pd.DataFrame(), pd.DataFrame(), pd.DataFrame())
        self.error = error

    def aggregate(self, request):
        self.requests.append(request)
        with open(request.abundance_file) as handle:
            self.files_seen.append(handle.read())
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def recording_aggregator():
    return RecordingAggregator
