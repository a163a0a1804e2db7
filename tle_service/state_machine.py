"""
Recovery State Machine Parser

A single finite-state pipeline drives every parse mode:

    INITIAL -> DETECTING_FORMAT -> [PARSING_NAME] -> PARSING_LINE1
            -> PARSING_LINE2 -> VALIDATING -> COMPLETED

with any non-terminal state able to move to ERROR. `step` is a pure
function of (state, context) returning the next state and a tuple of
effects; `run_pipeline` folds those effects into a fresh immutable context
and records the visited states. What each issue does (fail, warn, recover)
comes from the escalation table in `tle_service.policy`.

Recovery actions are only taken in recover mode. Each one counts against
`max_recovery_attempts`; the action that would exceed the budget is
replaced by an abort and the parse ends in ERROR.
"""

import dataclasses
from dataclasses import dataclass
from functools import reduce
from typing import Any, List, Optional, Tuple, Union

from tle_service.config import TLE_LINE_LENGTH, VALID_CLASSIFICATIONS
from tle_service.errors import ErrorCode, Severity, ValidationIssue
from tle_service.fields import FIELDS_BY_NAME, INVALID, decode, fields_for_line, is_invalid
from tle_service.lines import LineRole, assign_roles, split_lines
from tle_service.logging_config import get_logger
from tle_service.models import (
    ContextSummary,
    ParsedTLE,
    ParseMode,
    ParseResult,
    ParserOptions,
    RecoveryAction,
    RecoveryKind,
)
from tle_service.policy import Disposition, halts_immediately, resolve_disposition
from tle_service.rules import (
    check_advisories,
    check_checksums,
    check_classification,
    check_formats,
    check_line_count,
    check_line_structure,
    check_name,
    check_ranges,
    check_satellite_numbers,
    usable_satellite_number,
)
from tle_service.states import TERMINAL_STATES, ParserState, is_legal_transition

logger = get_logger(__name__)


@dataclass(frozen=True)
class ParserContext:
    """Everything the pipeline knows about one parse. Replaced, never mutated."""

    raw: Any
    options: ParserOptions
    lines: Tuple[str, ...] = ()
    comments: Tuple[str, ...] = ()
    line_count: int = 0
    has_name: bool = False
    name: Optional[str] = None
    line1: Optional[str] = None
    line2: Optional[str] = None
    fields: Tuple[Tuple[str, Any], ...] = ()
    errors: Tuple[ValidationIssue, ...] = ()
    warnings: Tuple[ValidationIssue, ...] = ()
    recovery_actions: Tuple[RecoveryAction, ...] = ()
    recovery_attempts: int = 0

    def field_values(self) -> dict:
        return dict(self.fields)


# Effects


@dataclass(frozen=True)
class RecordIssue:
    issue: ValidationIssue
    disposition: Disposition


@dataclass(frozen=True)
class RecordRecovery:
    action: RecoveryAction


@dataclass(frozen=True)
class SetField:
    name: str
    value: Any


@dataclass(frozen=True)
class UpdateContext:
    changes: Tuple[Tuple[str, Any], ...]


Effect = Union[RecordIssue, RecordRecovery, SetField, UpdateContext]


def apply_effect(context: ParserContext, effect: Effect) -> ParserContext:
    """Return a new context with one effect applied."""
    if isinstance(effect, RecordIssue):
        if effect.disposition is Disposition.WARN:
            return dataclasses.replace(
                context, warnings=context.warnings + (effect.issue.as_warning(),)
            )
        return dataclasses.replace(context, errors=context.errors + (effect.issue,))

    if isinstance(effect, RecordRecovery):
        attempts = context.recovery_attempts
        if effect.action.kind is not RecoveryKind.ABORT:
            attempts += 1
        return dataclasses.replace(
            context,
            recovery_actions=context.recovery_actions + (effect.action,),
            recovery_attempts=attempts,
        )

    if isinstance(effect, SetField):
        values = context.field_values()
        values[effect.name] = effect.value
        return dataclasses.replace(context, fields=tuple(values.items()))

    if isinstance(effect, UpdateContext):
        return dataclasses.replace(context, **dict(effect.changes))

    raise TypeError(f"Unknown effect: {effect!r}")


class _EffectBuilder:
    """
    Collects the effects of one step and tracks the recovery budget and
    halting as they would stand once the effects are applied.
    """

    def __init__(self, state: ParserState, context: ParserContext):
        self.state = state
        self.mode = context.options.mode
        self.max_attempts = context.options.max_recovery_attempts
        self.attempts = context.recovery_attempts
        self.effects: List[Effect] = []
        self.halted = False
        self.failed = False

    @property
    def recovering(self) -> bool:
        return self.mode is ParseMode.RECOVER

    def issue(self, issue: ValidationIssue) -> Disposition:
        disposition = resolve_disposition(issue, self.mode)
        self.effects.append(RecordIssue(issue, disposition))
        if disposition is Disposition.THROW:
            self.failed = True
        if halts_immediately(issue, disposition):
            self.halted = True
            if self.recovering:
                self._abort(f"Cannot continue: {issue.message}", issue.field)
        return disposition

    def handle(self, issue: ValidationIssue, kind: RecoveryKind, description: str,
               field: Optional[str] = None) -> Disposition:
        """Record an issue and, when it is recoverable, the recovery taken."""
        disposition = self.issue(issue)
        if disposition is Disposition.RECOVER:
            self.recover(kind, description, field if field is not None else issue.field)
        return disposition

    def recover(self, kind: RecoveryKind, description: str, field: Optional[str] = None) -> None:
        if self.halted or not self.recovering:
            return
        if self.attempts >= self.max_attempts:
            self.halted = True
            self._abort(f"Maximum recovery attempts ({self.max_attempts}) exceeded", field)
            return
        self.attempts += 1
        self.effects.append(RecordRecovery(RecoveryAction(
            kind=kind, description=description, state=self.state, field=field,
        )))

    def _abort(self, description: str, field: Optional[str]) -> None:
        self.effects.append(RecordRecovery(RecoveryAction(
            kind=RecoveryKind.ABORT, description=description, state=self.state, field=field,
        )))

    def set(self, name: str, value: Any) -> None:
        self.effects.append(SetField(name, value))

    def update(self, **changes: Any) -> None:
        self.effects.append(UpdateContext(tuple(changes.items())))

    def finish(self, next_state: ParserState) -> Tuple[ParserState, Tuple[Effect, ...]]:
        if self.halted:
            next_state = ParserState.ERROR
        return next_state, tuple(self.effects)


def _pick_data_lines(lines: Tuple[str, ...]) -> Optional[Tuple[Optional[str], str, str]]:
    """Find the single line-1 and line-2 candidates in an over-long record."""
    ones = [i for i, line in enumerate(lines) if line.startswith("1 ")]
    twos = [i for i, line in enumerate(lines) if line.startswith("2 ")]
    if len(ones) != 1 or len(twos) != 1 or ones[0] > twos[0]:
        return None
    index1, index2 = ones[0], twos[0]
    name = lines[index1 - 1] if index1 > 0 else None
    return name, lines[index1], lines[index2]


def _step_initial(b: _EffectBuilder, context: ParserContext):
    raw = context.raw
    if not isinstance(raw, str):
        b.issue(ValidationIssue(
            code=ErrorCode.INVALID_INPUT_TYPE,
            message=f"TLE data must be a string, got {type(raw).__name__}",
            severity=Severity.CRITICAL,
            field="input",
            expected="str",
            actual=type(raw).__name__,
        ))
    elif not raw.strip():
        b.issue(ValidationIssue(
            code=ErrorCode.EMPTY_INPUT,
            message="TLE data is empty or contains only whitespace",
            severity=Severity.CRITICAL,
            field="input",
        ))
    return b.finish(ParserState.DETECTING_FORMAT)


def _step_detecting_format(b: _EffectBuilder, context: ParserContext):
    lines, comments = split_lines(context.raw)
    lines = tuple(lines)
    b.update(lines=lines, comments=tuple(comments), line_count=len(lines))

    for issue in check_line_count(len(lines)):
        picked = None
        if b.recovering and issue.severity is Severity.ERROR:
            picked = _pick_data_lines(lines)
            if picked is None:
                issue = issue.model_copy(update={
                    "severity": Severity.CRITICAL,
                    "message": issue.message + "; unable to identify a unique line 1 and line 2",
                })
        b.handle(issue, RecoveryKind.ATTEMPT_FIX,
                 "Selected the unique line 1 and line 2 candidates from an over-long record")
        if b.halted:
            return b.finish(ParserState.ERROR)
        name, line1, line2 = picked
        b.update(has_name=name is not None, name=name, line1=line1, line2=line2)
        return b.finish(ParserState.PARSING_NAME if name is not None else ParserState.PARSING_LINE1)

    roles = {raw_line.role: raw_line.text for raw_line in assign_roles(list(lines))}
    has_name = LineRole.NAME in roles
    b.update(
        has_name=has_name,
        name=roles.get(LineRole.NAME),
        line1=roles[LineRole.LINE1],
        line2=roles[LineRole.LINE2],
    )
    return b.finish(ParserState.PARSING_NAME if has_name else ParserState.PARSING_LINE1)


def _step_parsing_name(b: _EffectBuilder, context: ParserContext):
    for issue in check_name(context.name):
        b.issue(issue)
    return b.finish(ParserState.PARSING_LINE1)


def _step_parsing_line(b: _EffectBuilder, context: ParserContext, line_number: int,
                       next_state: ParserState):
    line = context.line1 if line_number == 1 else context.line2

    for issue in check_line_structure(line, line_number):
        if issue.code is ErrorCode.INVALID_LINE_NUMBER:
            b.handle(issue, RecoveryKind.CONTINUE,
                     f"Ignoring unexpected line number marker '{line[0]}'")
        elif len(line) > TLE_LINE_LENGTH:
            b.handle(issue, RecoveryKind.ATTEMPT_FIX,
                     f"Truncated line {line_number} from {len(line)} to {TLE_LINE_LENGTH} characters",
                     f"line{line_number}")
        else:
            b.handle(issue, RecoveryKind.CONTINUE,
                     f"Line {line_number} has {len(line)} characters; decoding the fields present",
                     f"line{line_number}")
        if b.halted:
            return b.finish(ParserState.ERROR)

    working = line[:TLE_LINE_LENGTH]
    for spec in fields_for_line(line_number):
        raw = spec.extract(working)
        if raw is not None:
            b.set(spec.name, decode(raw, spec.encoding))
            continue
        if spec.default is not None:
            b.recover(RecoveryKind.USE_DEFAULT,
                      f"{spec.name} is missing; using default {spec.default!r}", spec.name)
        else:
            b.recover(RecoveryKind.SKIP_FIELD, f"{spec.name} is missing; left empty", spec.name)
        if b.halted:
            return b.finish(ParserState.ERROR)
        if spec.default is not None:
            b.set(spec.name, spec.default)

    return b.finish(next_state)


def _step_validating(b: _EffectBuilder, context: ParserContext):
    fields = context.field_values()
    line1 = context.line1[:TLE_LINE_LENGTH]
    line2 = context.line2[:TLE_LINE_LENGTH]
    raw_text = {}
    for line_number, line in ((1, line1), (2, line2)):
        for spec in fields_for_line(line_number):
            text = spec.extract(line)
            if text is not None:
                raw_text[spec.name] = text

    for issue in check_checksums(line1, line2):
        b.handle(issue, RecoveryKind.CONTINUE,
                 f"Line {issue.line}: ignoring checksum problem and keeping decoded values")
        if b.halted:
            return b.finish(ParserState.ERROR)

    number1 = fields.get("satellite_number_1")
    number2 = fields.get("satellite_number_2")
    for issue in check_satellite_numbers(fields):
        if issue.code is ErrorCode.SATELLITE_NUMBER_MISMATCH:
            b.handle(issue, RecoveryKind.ATTEMPT_FIX,
                     f"Keeping line 1 satellite number {number1} as authoritative")
        elif issue.line == 1 and usable_satellite_number(number2):
            b.handle(issue, RecoveryKind.ATTEMPT_FIX,
                     f"Using line 2 satellite number {number2}")
        else:
            b.handle(issue, RecoveryKind.SKIP_FIELD,
                     f"Line {issue.line}: satellite number left empty")
        if b.halted:
            return b.finish(ParserState.ERROR)

    for issue in check_classification(fields):
        b.set("classification", None)
        b.handle(issue, RecoveryKind.SKIP_FIELD, "Classification left empty")
        if b.halted:
            return b.finish(ParserState.ERROR)

    for issue in check_formats(fields, raw_text) + check_ranges(fields, raw_text):
        if issue.code is ErrorCode.INVALID_NUMBER_FORMAT:
            default = FIELDS_BY_NAME[issue.field].default
            if not (b.recovering and default is not None):
                default = None
            if default is not None:
                b.handle(issue, RecoveryKind.USE_DEFAULT, f"Using default {default!r} for {issue.field}")
            else:
                b.handle(issue, RecoveryKind.SKIP_FIELD, f"{issue.field} left empty")
            if not b.halted:
                b.set(issue.field, default)
        else:
            b.handle(issue, RecoveryKind.CONTINUE, f"Keeping out-of-range {issue.field} value")
        if b.halted:
            return b.finish(ParserState.ERROR)

    options = context.options
    if options.advisory_checks:
        for issue in check_advisories(fields, options.reference_time, options.stale_after_days):
            b.issue(issue)

    return b.finish(ParserState.ERROR if b.failed else ParserState.COMPLETED)


def step(state: ParserState, context: ParserContext) -> Tuple[ParserState, Tuple[Effect, ...]]:
    """
    Pure transition function.

    Args:
        state: Current non-terminal state
        context: Context as it stands on entering the state

    Returns:
        Tuple of (next_state, effects)
    """
    b = _EffectBuilder(state, context)
    if state is ParserState.INITIAL:
        return _step_initial(b, context)
    elif state is ParserState.DETECTING_FORMAT:
        return _step_detecting_format(b, context)
    elif state is ParserState.PARSING_NAME:
        return _step_parsing_name(b, context)
    elif state is ParserState.PARSING_LINE1:
        return _step_parsing_line(b, context, 1, ParserState.PARSING_LINE2)
    elif state is ParserState.PARSING_LINE2:
        return _step_parsing_line(b, context, 2, ParserState.VALIDATING)
    elif state is ParserState.VALIDATING:
        return _step_validating(b, context)
    raise ValueError(f"No transitions out of terminal state {state.value}")


def _clean(value: Any) -> Any:
    return None if is_invalid(value) else value


def build_record(context: ParserContext) -> ParsedTLE:
    """Assemble a (possibly partial) record from the decoded fields."""
    fields = context.field_values()
    number1 = fields.get("satellite_number_1", INVALID)
    number2 = fields.get("satellite_number_2", INVALID)
    if usable_satellite_number(number1):
        satellite_number = number1
    elif usable_satellite_number(number2):
        satellite_number = number2
    else:
        satellite_number = None

    classification = fields.get("classification")
    options = context.options
    values = {
        name: _clean(fields.get(name))
        for name in ParsedTLE.model_fields
        if name in FIELDS_BY_NAME
    }
    values.update(
        name=context.name,
        satellite_number=satellite_number,
        classification=classification if classification in VALID_CLASSIFICATIONS else None,
        line1=context.line1,
        line2=context.line2,
        warnings=context.warnings if options.include_warnings else None,
        comments=context.comments if options.include_comments else None,
        recovery_trail=(
            context.recovery_actions if options.mode is ParseMode.RECOVER else None
        ),
    )
    return ParsedTLE(**values)


def run_pipeline(text: Any, options: ParserOptions) -> ParseResult:
    """
    Drive the state machine from INITIAL to a terminal state.

    Args:
        text: Raw input; anything that is not a string fails in INITIAL
        options: Parser options, including the parse mode

    Returns:
        ParseResult describing the final state, data and diagnostics
    """
    context = ParserContext(raw=text, options=options)
    state = ParserState.INITIAL
    visited = [state]

    while state not in TERMINAL_STATES:
        next_state, effects = step(state, context)
        if not is_legal_transition(state, next_state):
            raise RuntimeError(f"Illegal transition {state.value} -> {next_state.value}")
        context = reduce(apply_effect, effects, context)
        for effect in effects:
            if isinstance(effect, RecordRecovery):
                action = effect.action
                log = logger.warning if action.kind is RecoveryKind.ABORT else logger.debug
                log("recovery_action", kind=action.kind.value, state=action.state.value,
                    field=action.field, description=action.description)
        logger.debug("state_transition", from_state=state.value, to_state=next_state.value)
        state = next_state
        visited.append(state)

    completed = state is ParserState.COMPLETED
    decoded_anything = bool(context.fields) or context.line1 is not None
    data = None
    if completed or (options.include_partial_results and decoded_anything):
        data = build_record(context)

    return ParseResult(
        success=completed,
        state=state,
        data=data,
        errors=context.errors,
        warnings=context.warnings,
        recovery_actions=context.recovery_actions,
        context=ContextSummary(
            line_count=context.line_count,
            has_name=context.has_name,
            recovery_attempts=context.recovery_attempts,
        ),
        visited_states=tuple(visited),
    )


class RecoveryStateMachineParser:
    """
    Best-effort parser that never raises for problems in the input.

    Runs the pipeline in recover mode; success or failure is reported
    through `ParseResult.state` and `ParseResult.success`.
    """

    def __init__(self, options: Any = None):
        options = ParserOptions.coerce(options)
        self.options = options.model_copy(update={"mode": ParseMode.RECOVER})

    def parse(self, text: Any) -> ParseResult:
        result = run_pipeline(text, self.options)
        if not result.success:
            logger.info("recovery_parse_failed", state=result.state.value,
                        errors=len(result.errors), actions=len(result.recovery_actions))
        return result


def parse_with_recovery(text: Any, options: Any = None) -> ParseResult:
    """Parse with the recovery state machine using the given options."""
    return RecoveryStateMachineParser(options).parse(text)
