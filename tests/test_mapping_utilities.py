import os

import pandas as pd
import pytest

from intergenic_call.annotation_utilities import TranscriptDatabase
from intergenic_call.exceptions import MappingResolutionError
from intergenic_call.mapping_utilities import build_tx2gene, create_tx2gene, genic_tx2gene, load_tx2gene
from intergenic_call.metadata_utilities import KallistoMetadata

from conftest import INTERGENIC_IDS


def test_tx2gene_contains_genic_then_intergenic_rows(user_metadata, context):
    tx2gene = build_tx2gene(KallistoMetadata(), user_metadata, context)
    assert tx2gene['TXNAME'].tolist() == ['ENST1.2', 'ENST2.1', 'ENST3.1'] + INTERGENIC_IDS
    assert tx2gene['GENEID'].tolist() == ['GENE1', 'GENE1', 'GENE2'] + INTERGENIC_IDS


def test_tx2gene_file_format(user_metadata, context):
    path = create_tx2gene(KallistoMetadata(), user_metadata, context)
    assert path == os.path.join(context.annotation_dir, 'tx2gene.tsv')
    with open(path) as handle:
        lines = handle.read().splitlines()
    assert lines[0] == 'TXNAME\tGENEID'
    assert lines[1] == 'ENST1.2\tGENE1'
    assert '"' not in ''.join(lines)
    assert not os.path.exists(path + '.tmp')


def test_every_intergenic_region_mapped_once(user_metadata, context):
    tx2gene = build_tx2gene(KallistoMetadata(ignore_tx_version=True), user_metadata, context)
    assert tx2gene['TXNAME'].is_unique
    for region in INTERGENIC_IDS:
        rows = tx2gene[(tx2gene['TXNAME'] == region) & (tx2gene['GENEID'] == region)]
        assert len(rows) == 1


def test_version_stripped_from_genic_transcripts_only(user_metadata, context):
    metadata = KallistoMetadata(ignore_tx_version=True)
    path = create_tx2gene(metadata, user_metadata, context)
    assert os.path.basename(path) == 'tx2gene_without_version.tsv'

    tx2gene = load_tx2gene(path)
    genic = tx2gene[tx2gene['TXNAME'] != tx2gene['GENEID']]
    assert genic['TXNAME'].tolist() == ['ENST1', 'ENST2', 'ENST3']
    assert not genic['TXNAME'].str.contains('.', regex=False).any()
    # Intergenic names keep their dots
    assert 'chrA.1_100_200' in tx2gene['TXNAME'].tolist()


def test_existing_file_is_returned_without_annotation(user_metadata, context):
    metadata = KallistoMetadata()
    os.makedirs(context.annotation_dir)
    cached = context.tx2gene_path(metadata)
    with open(cached, 'w') as out:
        out.write('TXNAME\tGENEID\ncached_tx\tcached_gene\n')

    def failing_factory(user):
        raise AssertionError('annotation should not be read')

    path = create_tx2gene(metadata, user_metadata, context, txdb_factory=failing_factory,
                          intergenic_source=failing_factory)
    assert path == cached
    assert load_tx2gene(path)['TXNAME'].tolist() == ['cached_tx']


def test_cache_key_depends_on_version_setting(user_metadata, context):
    with_version = create_tx2gene(KallistoMetadata(), user_metadata, context)
    without_version = create_tx2gene(KallistoMetadata(ignore_tx_version=True), user_metadata, context)
    assert with_version != without_version
    assert load_tx2gene(with_version)['TXNAME'].iloc[0] == 'ENST1.2'
    assert load_tx2gene(without_version)['TXNAME'].iloc[0] == 'ENST1'


def test_unresolved_transcript_propagates(user_metadata, context):
    txdb = TranscriptDatabase(pd.DataFrame({'tx_name': ['T1'], 'gene_id': [None]}))
    with pytest.raises(MappingResolutionError):
        create_tx2gene(KallistoMetadata(), user_metadata, context, txdb_factory=lambda user: txdb)
    assert not os.path.exists(context.tx2gene_path(KallistoMetadata()))


def test_annotation_dir_cannot_be_created(user_metadata, context, tmp_path):
    blocker = tmp_path / 'blocker'
    blocker.write_text('not a directory')
    blocked_context = type(context)(output_dir=context.output_dir, annotation_dir=str(blocker / 'annotation'))
    with pytest.raises(OSError):
        create_tx2gene(KallistoMetadata(), user_metadata, blocked_context)


def test_stripping_duplicates_keeps_first():
    txdb = TranscriptDatabase(pd.DataFrame({'tx_name': ['T1.1', 'T1.2', 'T2.1'],
                                            'gene_id': ['G1', 'G1', 'G2']}))
    tx2gene = genic_tx2gene(txdb, ignore_tx_version=True)
    assert tx2gene['TXNAME'].tolist() == ['T1', 'T2']
    assert tx2gene['GENEID'].tolist() == ['G1', 'G2']
