from qualitygate.config import GateConfig
from qualitygate.gates import StageResult, StageStatus, Verdict, evaluate


def _stage(name, status, required=True):
    return StageResult.from_token(name, status, required)


def test_empty_input_is_vacuous_pass():
    verdict = evaluate([])
    assert verdict.overall is Verdict.PASS
    assert verdict.summary == ()
    assert verdict.blocking == frozenset()


def test_scenario_pass_with_optional_skipped():
    verdict = evaluate(
        [
            _stage("backend", "success"),
            _stage("security", "success"),
            _stage("frontend", "skipped", required=False),
        ]
    )
    assert verdict.overall is Verdict.PASS
    assert verdict.blocking == frozenset()
    assert [line.name for line in verdict.summary] == ["backend", "security", "frontend"]


def test_scenario_required_failure_blocks():
    verdict = evaluate([_stage("backend", "failure"), _stage("security", "success")])
    assert verdict.overall is Verdict.FAIL
    assert verdict.blocking == {"backend"}
    assert verdict.summary[0].blocked
    assert not verdict.summary[1].blocked


def test_scenario_required_skipped_warns():
    verdict = evaluate([_stage("backend", "success"), _stage("security", "skipped")])
    assert verdict.overall is Verdict.WARN
    assert verdict.blocking == frozenset()
    assert verdict.warned == ("security",)


def test_scenario_collects_every_required_failure():
    verdict = evaluate([_stage("backend", "cancelled"), _stage("security", "failure")])
    assert verdict.overall is Verdict.FAIL
    assert verdict.blocking == {"backend", "security"}
    assert verdict.blocking_ordered == ("backend", "security")


def test_evaluation_is_idempotent():
    stages = [
        _stage("backend", "failure"),
        _stage("frontend", "bogus", required=False),
        _stage("security", "skipped"),
    ]
    assert evaluate(stages) == evaluate(stages)
    assert evaluate(stages).to_dict() == evaluate(list(stages)).to_dict()


def test_missing_required_stage_fails_closed():
    cfg = GateConfig(required=("backend", "security"))
    verdict = evaluate([_stage("backend", "success")], cfg)
    assert verdict.overall is Verdict.FAIL
    assert verdict.blocking == {"security"}
    last = verdict.summary[-1]
    assert last.name == "security"
    assert last.missing
    assert last.status is StageStatus.FAILURE
    assert not verdict.summary[0].missing


def test_missing_stages_follow_input_order():
    cfg = GateConfig(required=("security", "lint"))
    verdict = evaluate([_stage("backend", "success", required=False)], cfg)
    assert [line.name for line in verdict.summary] == ["backend", "security", "lint"]
    assert verdict.blocking_ordered == ("security", "lint")


def test_config_required_promotes_input_stage():
    cfg = GateConfig(required=("backend",))
    verdict = evaluate([_stage("backend", "failure", required=None)], cfg)
    assert verdict.overall is Verdict.FAIL
    assert verdict.summary[0].required


def test_monotonic_failure():
    base = [_stage("backend", "failure"), _stage("security", "success")]
    more = base + [_stage("lint", "cancelled")]
    first = evaluate(base)
    second = evaluate(more)
    assert first.overall is Verdict.FAIL
    assert second.overall is Verdict.FAIL
    assert "lint" in second.blocking
    assert first.blocking <= second.blocking


def test_optional_stage_never_changes_verdict():
    base = [_stage("backend", "success"), _stage("security", "success")]
    expected = evaluate(base).overall
    for status in ("success", "failure", "cancelled", "skipped", "exploded", ""):
        verdict = evaluate(base + [_stage("frontend", status, required=False)])
        assert verdict.overall is expected
        assert verdict.blocking == frozenset()
        assert not verdict.summary[-1].blocked


def test_unknown_token_on_required_stage_is_failure():
    verdict = evaluate([_stage("backend", "neutral")])
    assert verdict.overall is Verdict.FAIL
    line = verdict.summary[0]
    assert line.status is StageStatus.FAILURE
    assert line.reported == "neutral"


def test_allow_skip_turns_warn_into_pass():
    stages = [_stage("backend", "success"), _stage("frontend", "skipped")]
    assert evaluate(stages).overall is Verdict.WARN
    cfg = GateConfig(allow_skip=("frontend",))
    verdict = evaluate(stages, cfg)
    assert verdict.overall is Verdict.PASS
    assert not verdict.summary[1].warned


def test_skipped_is_pass_applies_to_all_required():
    stages = [_stage("backend", "skipped"), _stage("security", "skipped")]
    verdict = evaluate(stages, GateConfig(skipped_is_pass=True))
    assert verdict.overall is Verdict.PASS


def test_failure_wins_over_warn():
    verdict = evaluate([_stage("security", "skipped"), _stage("backend", "failure")])
    assert verdict.overall is Verdict.FAIL
    assert verdict.blocking == {"backend"}


def test_blocking_only_names_required_stages():
    verdict = evaluate(
        [
            _stage("backend", "failure"),
            _stage("docs", "failure", required=False),
            _stage("frontend", "cancelled", required=False),
        ]
    )
    required = {line.name for line in verdict.summary if line.required}
    assert verdict.blocking <= required
    assert verdict.blocking == {"backend"}


def test_allow_skip_does_not_excuse_cancelled():
    cfg = GateConfig(allow_skip=("security",))
    verdict = evaluate([_stage("security", "cancelled")], cfg)
    assert verdict.overall is Verdict.FAIL


def test_explicit_optional_overrides_configured_required():
    cfg = GateConfig(required=("backend", "security"))
    for status in ("skipped", "failure", "cancelled"):
        verdict = evaluate(
            [_stage("backend", "success", required=None), _stage("security", status, required=False)],
            cfg,
        )
        assert verdict.overall is Verdict.PASS
        assert verdict.blocking == frozenset()
        assert not verdict.summary[1].required
        assert len(verdict.summary) == 2
