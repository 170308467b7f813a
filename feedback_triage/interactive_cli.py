#!/usr/bin/env python3
"""Interactive CLI for the student feedback triage system.

This allows users to:
1. Enter feedback directly in the terminal, anonymously or with a name
2. See the classification and any safety alerts immediately
3. View the faculty dashboard stats
4. Test the system without making HTTP requests
"""
import asyncio
import sys
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box
from rich.prompt import Confirm, Prompt

import stats
from config import config
from database import init_db, get_db_session, save_submission, list_feedback_for_stats
from events import ChangeEvent, ChangeFeed
from alerting import AlertService
from exceptions import ValidationError
from pipeline import FeedbackPipeline


console = Console()


class InteractiveFeedbackSystem:
    """Interactive feedback triage system."""

    def __init__(self):
        """Initialize the system."""
        self.pipeline = FeedbackPipeline(config)
        self.change_feed = ChangeFeed()
        self.alert_service = AlertService(config)
        self.change_feed.subscribe("alerts", self.alert_service.handle_alerts_created)

    def display_result(self, submission):
        """Display triage results in a nice format.

        Args:
            submission: Pipeline output
        """
        feedback = submission.feedback
        table = Table(
            title="📊 Analysis Results",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold magenta"
        )

        table.add_column("Attribute", style="cyan", width=20)
        table.add_column("Value", style="green")

        table.add_row("Sentiment", feedback.sentiment)
        table.add_row("Topic", feedback.topic)
        table.add_row("Suggestions", feedback.suggestions)
        table.add_row("Student", feedback.student_name or "Anonymous")
        table.add_row("Processing Method", feedback.processing_method)

        console.print(table)

        if submission.alerts:
            self.display_alert(submission)

    def display_alert(self, submission):
        """Display alert notification.

        Args:
            submission: Pipeline output that raised alerts
        """
        lines = "\n".join(
            f"→ [bold]{alert.alert_type}[/bold] ({alert.severity})"
            for alert in submission.alerts
        )
        alert_content = f"""
[bold red] SAFETY ALERT RAISED![/bold red]

This feedback mentions a sensitive concern.

{lines}

[bold yellow]Action Required:[/bold yellow]
→ Review this feedback as a priority
→ Follow the student support procedure
        """

        panel = Panel(
            alert_content,
            title="🚨 ALERT 🚨",
            border_style="bold red",
            box=box.DOUBLE,
            padding=(1, 2)
        )

        console.print()
        console.print(panel)
        console.print()

    async def save_to_database(self, submission):
        """Save a submission and publish the change events.

        Returns:
            Saved feedback ID
        """
        async with get_db_session() as db:
            feedback, alerts = await save_submission(db, submission)

        await self.change_feed.publish(
            ChangeEvent(table="feedback", action="insert", records=[feedback.to_dict()])
        )
        if alerts:
            await self.change_feed.publish(ChangeEvent(
                table="alerts",
                action="insert",
                records=[{**alert.to_dict(), "feedback": feedback.to_dict()} for alert in alerts]
            ))
        return feedback.id

    async def display_stats(self):
        """Display dashboard stats computed from all stored feedback."""
        async with get_db_session() as db:
            records = await list_feedback_for_stats(db)
        dashboard = stats.aggregate(records)

        distribution = dashboard.sentiment_distribution
        summary = Table(title="📈 Dashboard", box=box.ROUNDED, header_style="bold magenta")
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="green")
        summary.add_row("Total Feedback", str(dashboard.total_feedback))
        summary.add_row("Positive", str(distribution.positive))
        summary.add_row("Negative", str(distribution.negative))
        summary.add_row("Neutral", str(distribution.neutral))
        console.print(summary)

        topics = Table(title="Top Topics", box=box.SIMPLE)
        topics.add_column("Topic", style="cyan")
        topics.add_column("Count", justify="right")
        for item in dashboard.top_topics:
            topics.add_row(item.topic, str(item.count))
        console.print(topics)

        activity = Table(title="Recent Activity", box=box.SIMPLE)
        activity.add_column("Date", style="cyan")
        activity.add_column("Count", justify="right")
        for item in dashboard.recent_activity:
            activity.add_row(item.date.isoformat(), str(item.count))
        console.print(activity)

    def display_welcome(self):
        """Display welcome message."""
        ai_line = (
            f"[green]✓[/green] AI: {config.AI_MODEL}"
            if self.pipeline.classifier.ai_available
            else "[yellow]✗[/yellow] AI: not configured"
        )
        welcome = f"""
[bold cyan]Student Feedback Triage System[/bold cyan]
[dim]Interactive CLI Mode[/dim]

Each feedback is analyzed for:
  • Sentiment (positive, negative, neutral)
  • Topic and suggested actions
  • Safety alerts (harassment, bullying, threats, ...)

Using:
  {ai_line}
  [green]✓[/green] Fallback: keyword heuristic

Type [bold]stats[/bold] for the dashboard, [bold]quit[/bold] to exit.
        """

        panel = Panel(
            welcome,
            border_style="bold blue",
            box=box.DOUBLE,
            padding=(1, 2)
        )

        console.print(panel)
        console.print()

    async def run_interactive(self):
        """Run the interactive CLI loop."""
        self.display_welcome()

        while True:
            console.print()
            console.print("[bold]Enter feedback to analyze[/bold] ('stats' or 'quit'):")
            console.print()

            feedback_text = Prompt.ask("Your feedback")

            if feedback_text.lower() in ['quit', 'exit', 'q']:
                console.print("\n[cyan]Goodbye![/cyan]\n")
                break

            if feedback_text.lower() == 'stats':
                try:
                    await self.display_stats()
                except Exception as e:
                    console.print(f"[yellow]⚠️  Could not load stats: {e}[/yellow]")
                continue

            is_anonymous = Confirm.ask("Submit anonymously?", default=True)
            student_name = None if is_anonymous else Prompt.ask("Your name", default="")

            console.print()
            console.print("[bold]Processing your feedback...[/bold]")
            console.print()

            try:
                submission = await self.pipeline.submit(feedback_text, is_anonymous, student_name)
            except ValidationError as e:
                console.print(f"[red]⚠️  {e.message}[/red]")
                continue

            self.display_result(submission)

            try:
                feedback_id = await self.save_to_database(submission)
                console.print(f"\n[dim]💾 Saved to database with ID: {feedback_id}[/dim]")
            except Exception as e:
                console.print(f"\n[yellow]⚠️  Could not save to database: {e}[/yellow]")


async def main():
    """Main entry point."""
    console.print("[cyan]Initializing database...[/cyan]")
    await init_db()

    system = InteractiveFeedbackSystem()

    try:
        await system.run_interactive()
    except KeyboardInterrupt:
        console.print("\n\n[cyan] Goodbye![/cyan]\n")
        sys.exit(0)


if __name__ == "__main__":
    asyncio.run(main())
