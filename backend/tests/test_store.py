from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from coupon_leaderboard.services.leaderboard import RedisSortedSetStore, SortedSetStoreError


@pytest.fixture()
def redis_mock():
    return MagicMock()


@pytest.fixture()
def redis_store(redis_mock):
    return RedisSortedSetStore(redis_mock)


def test_add_reports_new_members(redis_store, redis_mock):
    redis_mock.zadd.return_value = 1
    assert redis_store.add('q:promoA', 'alice', 100.0) is True
    redis_mock.zadd.assert_called_once_with('q:promoA', {'alice': 100.0})
    redis_mock.zadd.return_value = 0
    assert redis_store.add('q:promoA', 'alice', 120.0) is False


def test_range_and_range_with_scores(redis_store, redis_mock):
    redis_mock.zrange.return_value = ['bob', 'alice']
    assert redis_store.range('q:promoA', 0, -1) == ['bob', 'alice']
    redis_mock.zrange.assert_called_with('q:promoA', 0, -1)

    redis_mock.zrange.return_value = [('bob', 50), ('alice', 100.0)]
    assert redis_store.range_with_scores('q:promoA', 0, 1) == [('bob', 50.0), ('alice', 100.0)]
    redis_mock.zrange.assert_called_with('q:promoA', 0, 1, withscores=True)


def test_remove_remove_range_and_rank(redis_store, redis_mock):
    redis_mock.zrem.return_value = 0
    assert redis_store.remove('q:promoA', 'ghost') == 0
    redis_mock.zremrangebyrank.return_value = 3
    assert redis_store.remove_range('q:promoA', 0, -1) == 3
    redis_mock.zremrangebyrank.assert_called_once_with('q:promoA', 0, -1)
    redis_mock.zrank.return_value = None
    assert redis_store.rank('q:promoA', 'ghost') is None
    redis_mock.zrank.return_value = 2
    assert redis_store.rank('q:promoA', 'alice') == 2


def test_replace_runs_as_one_transaction(redis_store, redis_mock):
    pipe = redis_mock.pipeline.return_value
    assert redis_store.replace('lb:promoA', {'bob': 0.0, 'alice': 1.0}) == 2
    redis_mock.pipeline.assert_called_once_with(transaction=True)
    pipe.delete.assert_called_once_with('lb:promoA')
    pipe.zadd.assert_called_once_with('lb:promoA', {'bob': 0.0, 'alice': 1.0})
    pipe.execute.assert_called_once_with()
    # individual commands are not sent outside the pipeline
    redis_mock.zadd.assert_not_called()
    redis_mock.zremrangebyrank.assert_not_called()


def test_replace_with_empty_mapping_only_deletes(redis_store, redis_mock):
    pipe = redis_mock.pipeline.return_value
    assert redis_store.replace('lb:promoA', {}) == 0
    pipe.delete.assert_called_once_with('lb:promoA')
    pipe.zadd.assert_not_called()


def test_replace_failure_becomes_store_error(redis_store, redis_mock):
    redis_mock.pipeline.return_value.execute.side_effect = RedisConnectionError('refused')
    with pytest.raises(SortedSetStoreError, match="MULTI failed for key 'lb:promoA'"):
        redis_store.replace('lb:promoA', {'bob': 0.0})


@pytest.mark.parametrize('error', [RedisConnectionError('refused'), RedisTimeoutError('slow')])
def test_redis_errors_become_store_errors(redis_store, redis_mock, error):
    redis_mock.zadd.side_effect = error
    with pytest.raises(SortedSetStoreError, match="ZADD failed for key 'q:promoA'"):
        redis_store.add('q:promoA', 'alice', 1.0)


def test_from_url_builds_decoding_client():
    store = RedisSortedSetStore.from_url('redis://localhost:6379/3', socket_timeout=2.5)
    kwargs = store.client.connection_pool.connection_kwargs
    assert kwargs['decode_responses'] is True
    assert kwargs['socket_timeout'] == 2.5
    assert kwargs['db'] == 3
