"""Tests for per-word classifiers and the Classifier orchestrator.

Uses the Spam/Ham reference table. Informativeness scores of the known
words in ``mixed_words`` rank, from least to most informative:
quick < free < asdf < bayes < monad.
"""

from __future__ import annotations

import pytest

from prob_classifier.classifier import (
    ClassificationResult,
    Classifier,
    WordClassifier,
    adjust_minimums,
    default_smoothing_floor,
    new_classifier,
)
from prob_classifier.config import ClassifierSettings
from prob_classifier.distribution import from_counts, uniform
from prob_classifier.knowledge import HAM, SPAM, InMemoryKnowledgeBase
from prob_classifier.queries import posterior_given_word, prior_over_categories
from prob_classifier.strategies import FisherStrategy, NaiveBayesStrategy


# ---------------------------------------------------------------------------
# Smoothing
# ---------------------------------------------------------------------------

class TestAdjustMinimums:
    def test_default_floor(self, kb):
        assert default_smoothing_floor(kb) == pytest.approx(1 / 162)

    def test_zero_mass_is_floored(self):
        d = adjust_minimums(from_counts(["a", "b"], [0, 1]), 0.01)
        assert d.probability("a") == pytest.approx(0.01 / 1.01)
        assert sum(d.to_dict().values()) == pytest.approx(1.0)

    def test_masses_above_floor_unchanged(self):
        d = from_counts(["a", "b"], [3, 7])
        assert adjust_minimums(d, 0.01).to_dict() == pytest.approx(d.to_dict())

    @pytest.mark.parametrize("floor", [0.0, 1.0, -0.5])
    def test_invalid_floor_raises(self, floor):
        with pytest.raises(ValueError, match="floor"):
            adjust_minimums(uniform(["a", "b"]), floor)


# ---------------------------------------------------------------------------
# Word classifier table
# ---------------------------------------------------------------------------

class TestWordClassifiers:
    """Tests for the cached per-word records."""

    def test_every_known_word_is_cached(self, kb, bayes_classifier):
        assert set(bayes_classifier.vocabulary) == set(kb.known_words())
        assert len(bayes_classifier) == 18
        assert "free" in bayes_classifier

    def test_record_contents(self, kb, bayes_classifier):
        record = bayes_classifier["free"]
        assert isinstance(record, WordClassifier)
        flat = posterior_given_word(kb, "free", uniform(kb.categories()))
        assert record.distribution.to_dict() == pytest.approx(flat.to_dict())
        assert record.score == pytest.approx(flat.probability(SPAM) - 0.5)

    def test_records_have_no_zero_mass(self, bayes_classifier):
        floor = 1 / 162
        for word in bayes_classifier.vocabulary:
            dist = bayes_classifier[word].distribution
            assert all(m >= floor / (1 + floor) for m in dist.to_dict().values())
            assert sum(dist.to_dict().values()) == pytest.approx(1.0)

    def test_scores_are_distances_from_uniform(self, bayes_classifier):
        for word in bayes_classifier.vocabulary:
            assert 0.0 <= bayes_classifier[word].score <= 0.5

    def test_monad_is_maximally_informative(self, bayes_classifier):
        assert bayes_classifier["monad"].score == pytest.approx(0.5)

    def test_records_are_frozen(self, bayes_classifier):
        with pytest.raises(AttributeError):
            bayes_classifier["free"].score = 0.0  # type: ignore[misc]

    def test_zero_row_words_are_skipped(self):
        kb = InMemoryKnowledgeBase(["a", "b"], [5, 5], {"ghost": [0, 0], "real": [2, 1]})
        clf = new_classifier(kb)
        assert "ghost" not in clf
        assert clf.classify(["ghost"]) == clf.classify([])

    def test_custom_smoothing_floor(self, kb):
        clf = new_classifier(kb, settings=ClassifierSettings(smoothing_floor=0.1))
        assert clf["monad"].distribution.probability(SPAM) == pytest.approx(0.1 / 1.1)

    def test_most_informative_words(self, bayes_classifier):
        ranked = bayes_classifier.most_informative_words(top_n=3)
        assert len(ranked) == 3
        scores = [s for _, s in ranked]
        assert scores == sorted(scores, reverse=True)
        assert ranked[0][1] == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestSelection:
    """Which per-word classifiers a query uses."""

    def test_unknown_words_are_dropped(self, bayes_classifier):
        selected = bayes_classifier.word_classifiers(["jump", "free", "test"])
        assert [c.word for c in selected] == ["free"]

    def test_least_informative_first_by_default(self, bayes_classifier, mixed_words):
        selected = bayes_classifier.word_classifiers(mixed_words, n=3)
        assert [c.word for c in selected] == ["quick", "free", "asdf"]

    def test_most_informative_first_when_configured(self, kb, mixed_words):
        clf = new_classifier(kb, settings=ClassifierSettings(most_informative_first=True))
        selected = clf.word_classifiers(mixed_words, n=3)
        assert [c.word for c in selected] == ["monad", "bayes", "asdf"]

    def test_n_limits_selection(self, bayes_classifier, mixed_words):
        assert len(bayes_classifier.word_classifiers(mixed_words, n=0)) == 0
        assert len(bayes_classifier.word_classifiers(mixed_words)) == 5

    def test_duplicates_are_kept(self, bayes_classifier):
        selected = bayes_classifier.word_classifiers(["free", "free"])
        assert [c.word for c in selected] == ["free", "free"]

    def test_negative_n_raises(self, bayes_classifier):
        with pytest.raises(ValueError, match="non-negative"):
            bayes_classifier.word_classifiers(["free"], n=-1)

    def test_default_n_from_settings(self, kb, mixed_words):
        clf = new_classifier(kb, settings=ClassifierSettings(top_n=2))
        assert len(clf.word_classifiers(mixed_words)) == 2


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class TestClassify:
    """End-to-end classification on the reference corpus."""

    def test_free_is_spam(self, bayes_classifier):
        posterior = bayes_classifier.posterior_over_categories(["free"])
        assert bayes_classifier.classify(["free"]) == SPAM
        assert posterior.probability(SPAM) > 0.5
        assert posterior.probability(SPAM) == pytest.approx(57 / 63)

    def test_monad_is_ham(self, bayes_classifier):
        posterior = bayes_classifier.posterior_over_categories(["monad"])
        assert bayes_classifier.classify(["monad"]) == HAM
        assert posterior.probability(HAM) > 0.98

    def test_fisher_free_and_monad(self, fisher_classifier):
        assert fisher_classifier.classify(["free"]) == SPAM
        assert fisher_classifier.classify(["monad"]) == HAM

    @pytest.mark.parametrize("strategy", ["bayes", "fisher"])
    def test_no_words_falls_back_to_prior(self, kb, strategy):
        clf = new_classifier(kb, strategy)
        assert clf.classify([]) == prior_over_categories(kb).most_probable()

    @pytest.mark.parametrize("strategy", ["bayes", "fisher"])
    def test_unknown_word_is_ignored(self, kb, strategy):
        clf = new_classifier(kb, strategy)
        unknown = clf.posterior_over_categories(["totally_unknown_word"])
        empty = clf.posterior_over_categories([])
        assert unknown.to_dict() == pytest.approx(empty.to_dict())
        assert clf.classify(["totally_unknown_word"]) == clf.classify([])

    def test_deterministic(self, kb, mixed_words):
        first = new_classifier(kb, "fisher")
        second = new_classifier(kb, "fisher")
        results = {first.classify(mixed_words) for _ in range(5)}
        results.add(second.classify(mixed_words))
        assert len(results) == 1

    def test_accepts_generators(self, bayes_classifier):
        assert bayes_classifier.classify(w for w in ["free", "asdf"]) == SPAM

    def test_explicit_prior(self, bayes_classifier):
        ham_heavy = from_counts([SPAM, HAM], [1, 999])
        posterior = bayes_classifier.posterior_over_categories(["hello"], prior=ham_heavy)
        assert posterior.most_probable() == HAM

    def test_reweighting_matches_direct_bayes(self, kb, bayes_classifier):
        for word in ["free", "asdf", "hello", "quick", "the"]:
            direct = posterior_given_word(kb, word)
            combined = bayes_classifier.posterior_over_categories([word])
            assert combined.to_dict() == pytest.approx(direct.to_dict())

    def test_uses_given_strategy_object(self, kb):
        clf = Classifier(kb, FisherStrategy())
        assert clf.strategy_name == "fisher"
        assert isinstance(new_classifier(kb).strategy, NaiveBayesStrategy)

    def test_unknown_strategy_name_raises(self, kb):
        with pytest.raises(ValueError, match="Unknown strategy"):
            new_classifier(kb, "magic")

    def test_three_categories(self, news_kb):
        for strategy in ("bayes", "fisher"):
            clf = new_classifier(news_kb, strategy)
            assert clf.classify(["python", "server"]) == "tech"
            assert clf.classify(["goal", "match", "today"]) == "sports"


class TestSelectionScenarios:
    """Both readings of which words to combine, on the same input."""

    def test_least_informative_reading(self, bayes_classifier, mixed_words):
        # quick, free, asdf
        assert bayes_classifier.classify(mixed_words, n=3) == SPAM

    def test_most_informative_reading(self, kb, mixed_words):
        clf = new_classifier(kb, settings=ClassifierSettings(most_informative_first=True))
        # monad, bayes, asdf
        assert clf.classify(mixed_words, n=3) == HAM


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class TestExplain:
    def test_explain_bayes(self, bayes_classifier):
        result = bayes_classifier.explain(["free", "jump"])
        assert isinstance(result, ClassificationResult)
        assert result.predicted_class == SPAM
        assert result.confidence == pytest.approx(57 / 63)
        assert result.words_used == ["free"]
        assert result.strategy == "bayes"

    def test_explain_selects_words_once(self, bayes_classifier, mixed_words, monkeypatch):
        calls = []
        select = bayes_classifier.word_classifiers

        def counting(words, n=None):
            calls.append(list(words))
            return select(words, n)

        monkeypatch.setattr(bayes_classifier, "word_classifiers", counting)
        result = bayes_classifier.explain(mixed_words, n=3)
        assert len(calls) == 1
        assert result.words_used == ["quick", "free", "asdf"]
        assert result.predicted_class == SPAM

    def test_explain_fisher_confidence_is_share(self, fisher_classifier, mixed_words):
        result = fisher_classifier.explain(mixed_words)
        total = sum(result.scores.values())
        assert result.confidence == pytest.approx(result.scores[result.predicted_class] / total)

    def test_to_dict(self, bayes_classifier):
        d = bayes_classifier.explain(["monad"]).to_dict()
        assert d["predicted_class"] == HAM
        assert list(d["scores"]) == [HAM, SPAM]
        assert set(d) == {"predicted_class", "confidence", "strategy", "words_used", "scores"}

    def test_properties(self, kb, bayes_classifier):
        assert bayes_classifier.categories == [SPAM, HAM]
        assert bayes_classifier.knowledge_base is kb
        assert bayes_classifier.prior.probability(SPAM) == pytest.approx(103 / 160)
        assert bayes_classifier.settings == ClassifierSettings()
