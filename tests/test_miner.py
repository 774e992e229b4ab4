"""End-to-end mining through RuleMiner."""
from datetime import datetime, timedelta, timezone

import pytest

from rule_discovery import ConfigError, InvalidTransactionError, MiningConfig, RuleMiner, Transaction
from rule_discovery.rule_mining import AprioriMiner

from conftest import ELECTRONICS, GROCERIES, T0, make_transactions


def electronics_miner(**kwargs):
    miner = RuleMiner(MiningConfig(**kwargs))
    miner.add_transactions(make_transactions(ELECTRONICS))
    return miner


@pytest.mark.parametrize("algorithm", ['apriori', 'fpgrowth'])
def test_laptop_implies_mouse(algorithm):
    miner = electronics_miner(min_support=0.3, min_confidence=0.7, min_lift=1.2, algorithm=algorithm)
    rules, stats = miner.mine_association_rules()

    laptop_mouse = [r for r in rules if r.antecedent == ('Laptop',) and r.consequent == ('Mouse',)]
    assert len(laptop_mouse) == 1
    metrics = laptop_mouse[0].metrics
    assert metrics.support == 0.75
    assert metrics.confidence == 1.0
    assert metrics.lift == pytest.approx(1.33, abs=0.01)

    assert stats['num_rules'] == len(rules)
    assert stats['transactions_processed'] == 4
    assert stats['algorithm'] == algorithm


def test_no_phone_rules_at_half_support():
    miner = electronics_miner(min_support=0.5, min_confidence=0.7, min_lift=1.2)
    rules, _ = miner.mine_association_rules()
    assert all('Phone' not in r.items for r in rules)


def test_phone_rules_at_low_support():
    miner = electronics_miner(min_support=0.2, min_confidence=0.7, min_lift=1.2)
    rules, _ = miner.mine_association_rules()
    assert any('Phone' in r.items for r in rules)


def test_empty_log_gives_empty_results():
    miner = RuleMiner(MiningConfig(min_support=0.3))
    rules, stats = miner.mine_association_rules()
    assert rules == []
    assert stats['num_rules'] == 0
    itemsets, _ = miner.mine_itemsets()
    assert itemsets == []
    patterns, _ = miner.mine_sequential_patterns()
    assert patterns == []


def test_invalid_support_rejected_before_scan(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("transactions were scanned")

    monkeypatch.setattr(AprioriMiner, 'find_frequent_itemsets', fail)

    with pytest.raises(ConfigError):
        RuleMiner(MiningConfig(min_support=1.5))

    miner = electronics_miner()
    miner.config.min_support = 1.5
    with pytest.raises(ConfigError):
        miner.mine_association_rules()
    with pytest.raises(ConfigError):
        miner.mine_itemsets()
    with pytest.raises(ConfigError):
        miner.mine_sequential_patterns()


def test_checkout_sequence():
    miner = RuleMiner(MiningConfig(min_support=0.5, max_time_gap=timedelta(hours=24)))
    miner.add_transactions([
        Transaction('e1', ('View',), T0, actor_id='u1'),
        Transaction('e2', ('AddToCart',), T0 + timedelta(minutes=5), actor_id='u1'),
        Transaction('e3', ('Checkout',), T0 + timedelta(minutes=10), actor_id='u1'),
    ])
    patterns, stats = miner.mine_sequential_patterns()

    funnel = [p for p in patterns if len(p.sequence) == 3]
    assert len(funnel) == 1
    assert funnel[0].sequence == (('View',), ('AddToCart',), ('Checkout',))
    assert funnel[0].time_gaps == (timedelta(minutes=5), timedelta(minutes=5))
    assert stats['num_groups'] == 1


@pytest.mark.parametrize("algorithm", ['apriori', 'fpgrowth'])
def test_idempotent(algorithm):
    miner = RuleMiner(MiningConfig(min_support=0.2, min_confidence=0.5, min_lift=0.0, algorithm=algorithm))
    miner.add_transactions(make_transactions(GROCERIES))
    first, _ = miner.mine_association_rules()
    second, _ = miner.mine_association_rules()
    assert first == second
    assert first


def test_algorithms_produce_identical_rules():
    rules = {}
    for algorithm in ('apriori', 'fpgrowth'):
        miner = RuleMiner(MiningConfig(min_support=0.2, min_confidence=0.5, min_lift=0.0, algorithm=algorithm))
        miner.add_transactions(make_transactions(GROCERIES))
        rules[algorithm], _ = miner.mine_association_rules()
    assert rules['apriori'] == rules['fpgrowth']


def test_rule_properties_hold():
    config = MiningConfig(min_support=0.2, min_confidence=0.6, min_lift=1.0)
    miner = RuleMiner(config)
    miner.add_transactions(make_transactions(GROCERIES))
    rules, _ = miner.mine_association_rules()

    assert rules
    pairs = {(r.antecedent, r.consequent) for r in rules}
    for r in rules:
        m = r.metrics
        assert not set(r.antecedent) & set(r.consequent)
        assert m.support >= config.min_support
        assert m.confidence >= config.min_confidence
        assert m.lift >= config.min_lift
        assert 0.0 <= m.support <= 1.0
        assert 0.0 <= m.confidence <= 1.0
        assert m.conviction >= 0.0
        assert (m.conviction == float('inf')) == (m.confidence == 1.0)
        assert (r.consequent, r.antecedent) not in pairs


def test_appends_are_picked_up_by_next_call():
    miner = electronics_miner(min_support=0.3, min_confidence=0.7, min_lift=1.0)
    assert miner.transaction_count() == 4
    before, _ = miner.mine_itemsets()
    miner.add_transaction(Transaction('tx99', ('Phone', 'Phone Case'), T0))
    miner.add_transaction(Transaction('tx100', ('Phone', 'Phone Case'), T0))
    after, stats = miner.mine_itemsets()
    assert stats['transactions_processed'] == 6
    assert ('Phone', 'Phone Case') in [i.items for i in after]
    assert ('Phone', 'Phone Case') not in [i.items for i in before]


def test_mixed_timestamp_conventions_rejected_at_append():
    miner = RuleMiner(MiningConfig(min_support=0.0))
    miner.add_transaction(Transaction('e1', ('View',), datetime(2024, 1, 1), actor_id='u1'))
    with pytest.raises(InvalidTransactionError):
        miner.add_transaction(
            Transaction('e2', ('Buy',), datetime(2024, 1, 1, 1, tzinfo=timezone.utc), actor_id='u1'))

    patterns, stats = miner.mine_sequential_patterns()
    assert patterns == []
    assert stats['transactions_processed'] == 1
