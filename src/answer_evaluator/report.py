"""Session statistics, breakdowns and plots for graded answer sheets."""

import os
import json
from dataclasses import asdict
from enum import Enum
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats
import matplotlib.pyplot as plt
import seaborn as sns

from answer_evaluator.models import AnswerRecord, SessionStatistics
from answer_evaluator.text import format_score

COMPONENTS = ["keywords", "jaccard", "math", "length"]

_BREAKDOWN_COLUMNS = ["count", "correct", "accuracy", "mean_score"]


def sanitize_for_json(obj):
    """Recursively convert numpy types, enums, etc., to JSON-safe types."""
    if isinstance(obj, dict):
        return {sanitize_for_json(k): sanitize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_for_json(x) for x in obj]
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, (np.floating, float)):
        value = float(obj)
        return None if np.isnan(value) else value
    elif isinstance(obj, (np.integer, np.bool_)):
        return obj.item()
    else:
        return obj


class SessionReport:
    """Aggregate view over the graded answers of one session."""

    def __init__(self, records: Sequence[AnswerRecord], total_questions: Optional[int] = None):
        self.records = list(records)
        self.total_questions = total_questions if total_questions is not None else len(self.records)

    # ----------------- tables -----------------

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for r in self.records:
            b = r.evaluation.breakdown
            rows.append({
                "question_id": r.question_id,
                "topic": r.topic,
                "kind": r.kind.value,
                "mode": r.mode,
                "score": r.score,
                "correct": bool(r.correct),
                "hints_used": r.hints_used,
                "time_spent": r.time_spent,
                "free_text": not r.kind.is_choice,
                "keywords": b.keywords,
                "jaccard": b.jaccard,
                "math": b.math,
                "length": b.length,
            })
        return pd.DataFrame(rows)

    def statistics(self) -> SessionStatistics:
        answered = len(self.records)
        if answered == 0:
            return SessionStatistics(total_questions=self.total_questions)

        scores = np.array([r.score for r in self.records], dtype=float)
        correct = sum(1 for r in self.records if r.correct)
        return SessionStatistics(
            total_questions=self.total_questions,
            answered_questions=answered,
            average_score=float(np.mean(scores)),
            correct_answers=correct,
            time_spent=float(sum(r.time_spent for r in self.records)),
            accuracy=correct / answered,
        )

    def _breakdown(self, column: str) -> pd.DataFrame:
        df = self.to_frame()
        if df.empty:
            return pd.DataFrame(columns=[column] + _BREAKDOWN_COLUMNS)

        grouped = df.groupby(column, sort=True).agg(
            count=("score", "size"),
            correct=("correct", "sum"),
            mean_score=("score", "mean"),
        )
        grouped["accuracy"] = grouped["correct"] / grouped["count"]
        return grouped.reset_index()[[column] + _BREAKDOWN_COLUMNS]

    def topic_breakdown(self) -> pd.DataFrame:
        return self._breakdown("topic")

    def kind_breakdown(self) -> pd.DataFrame:
        return self._breakdown("kind")

    def mode_breakdown(self) -> pd.DataFrame:
        return self._breakdown("mode")

    def component_correlations(self) -> Dict[str, Dict[str, float]]:
        """Spearman correlation of each component with the final score.

        Only free-text answers carry components. Components that are
        constant over the session are left out.
        """
        df = self.to_frame()
        if df.empty:
            return {}
        df = df[df["free_text"]]
        if len(df) < 3 or df["score"].nunique() < 2:
            return {}

        result = {}
        for comp in COMPONENTS:
            if df[comp].nunique() < 2:
                continue
            rho, p = stats.spearmanr(df[comp], df["score"])
            result[comp] = {"rho": float(rho), "p_value": float(p)}
        return result

    # ----------------- export -----------------

    def to_dict(self) -> Dict:
        return sanitize_for_json({
            "statistics": asdict(self.statistics()),
            "topic_breakdown": self.topic_breakdown().to_dict(orient="records"),
            "kind_breakdown": self.kind_breakdown().to_dict(orient="records"),
            "mode_breakdown": self.mode_breakdown().to_dict(orient="records"),
            "component_correlations": self.component_correlations(),
            "results": [
                {
                    "question_id": r.question_id,
                    "topic": r.topic,
                    "kind": r.kind,
                    "mode": r.mode,
                    "user_answer": r.user_answer,
                    "score": r.score,
                    "correct": r.correct,
                    "hints_used": r.hints_used,
                    "time_spent": r.time_spent,
                    "evaluation": r.evaluation.to_dict(),
                }
                for r in self.records
            ],
        })

    def save(self, save_dir: str, plots: bool = True) -> str:
        """Write session_report.json (and plots) into save_dir."""
        os.makedirs(save_dir, exist_ok=True)

        json_path = os.path.join(save_dir, "session_report.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        if plots and self.records:
            self._plot_topic_scores(os.path.join(save_dir, "topic_scores.png"))
            self._plot_score_distribution(os.path.join(save_dir, "score_distribution.png"))
            self._plot_component_heatmap(os.path.join(save_dir, "component_heatmap.png"))

        print(f"  ✓ Saved outputs to {save_dir}/")
        return json_path

    # ----------------- pretty printing -----------------

    def print_summary(self):
        s = self.statistics()
        print("\n" + "=" * 80)
        print("SESSION SUMMARY")
        print("=" * 80)
        print(f"  Answered:        {s.answered_questions}/{s.total_questions}")
        print(f"  Average Score:   {format_score(s.average_score)}")
        print(f"  Correct Answers: {s.correct_answers} ({format_score(s.accuracy)})")
        print(f"  Time Spent:      {s.time_spent:.0f}s")

        topics = self.topic_breakdown()
        if not topics.empty:
            print("\n  Topic Breakdown:")
            print(f"    {'Topic':<32} {'n':<5} {'Mean':<8} {'Accuracy':<8}")
            print(f"    {'-' * 56}")
            for _, row in topics.iterrows():
                print(
                    f"    {str(row['topic'])[:32]:<32} {int(row['count']):<5} "
                    f"{row['mean_score']:<8.3f} {row['accuracy']:<8.3f}"
                )

        corr = self.component_correlations()
        if corr:
            print("\n  Component Correlation with Score (Spearman):")
            for comp, vals in corr.items():
                print(f"    {comp:<10} rho={vals['rho']:+.3f}  p={vals['p_value']:.4f}")
        print("=" * 80)

    # ----------------- plots -----------------

    def _plot_topic_scores(self, save_path: str):
        topics = self.topic_breakdown()

        fig, ax = plt.subplots(figsize=(12, max(4, len(topics) * 0.5)))
        ax.barh(topics["topic"].astype(str), topics["mean_score"], color="steelblue")
        ax.set_xlim(0, 1)
        ax.axvline(x=0.6, color="gray", linestyle="--", alpha=0.5)
        ax.set_xlabel("Mean Score")
        ax.set_title("Mean Score per Topic", fontweight="bold")
        ax.grid(axis="x", alpha=0.3)

        plt.tight_layout()
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close()

    def _plot_score_distribution(self, save_path: str):
        scores = [r.score for r in self.records]

        fig, ax = plt.subplots(figsize=(10, 5))
        ax.hist(scores, bins=np.linspace(0, 1, 11), color="lightgreen", edgecolor="black")
        ax.axvline(x=0.6, color="red", linestyle="--", alpha=0.5, label="Correct threshold")
        ax.set_xlabel("Score")
        ax.set_ylabel("Answers")
        ax.set_title("Score Distribution", fontweight="bold")
        ax.legend()

        plt.tight_layout()
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close()

    def _plot_component_heatmap(self, save_path: str):
        df = self.to_frame()
        df = df[df["free_text"]]
        if df.empty:
            return

        matrix = df.set_index("question_id")[COMPONENTS + ["score"]]

        plt.figure(figsize=(8, max(4, len(matrix) * 0.4)))
        sns.heatmap(matrix, annot=True, fmt=".2f", cmap="RdYlGn", vmin=0, vmax=1, linewidths=0.5)
        plt.title("Score Components per Answer", fontweight="bold")
        plt.tight_layout()
        plt.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close()