"""Tests for match creation, official data writes and status transitions."""

import threading

import pytest

from predictxi.errors import (
    AuthorizationError,
    ConflictError,
    InvalidTeamError,
    LifecycleError,
    LineupValidationError,
    MatchLockedError,
    MatchNotFoundError,
    NotFoundError,
    PredictionsClosedError,
)
from predictxi.lifecycle import advance_status, assert_official_writable, assert_predictions_open
from predictxi.schemas import CreateMatchRequest, FinalizeMatchRequest, Goal, Match, MatchScore


def finalize(game, admin, match, **kwargs):
    return game.finalize_match(admin, FinalizeMatchRequest(match_id=match.id, **kwargs))


class TestCreateMatch:
    """Tests for creating fixtures."""

    def test_new_match_is_draft(self, match):
        assert match.status == 'draft'
        assert match.version == 1
        assert match.lineups.home == []
        assert match.events.motm is None

    def test_duplicate_fixture_rejected(self, game, admin, league, match):
        """Test the same fixture cannot be created twice on one matchday."""
        with pytest.raises(ConflictError):
            game.create_match(
                admin,
                CreateMatchRequest(
                    league=league.id, matchday=1, home_team='Liverpool', away_team='Arsenal'
                ),
            )

    def test_same_teams_other_matchday(self, game, admin, league, match):
        other = game.create_match(
            admin,
            CreateMatchRequest(
                league=league.id, matchday=20, home_team='Arsenal', away_team='Liverpool'
            ),
        )
        assert other.id != match.id
        assert [m.matchday for m in game.lifecycle.list_matches(league.id)] == [1, 20]

    def test_unknown_league(self, game, admin):
        with pytest.raises(NotFoundError) as exc:
            game.create_match(
                admin,
                CreateMatchRequest(league='nope', matchday=1, home_team='A', away_team='B'),
            )
        assert exc.value.key == 'nope'

    def test_team_cannot_play_itself(self, league):
        with pytest.raises(ValueError):
            CreateMatchRequest(
                league=league.id, matchday=1, home_team='Arsenal', away_team='Arsenal'
            )

    def test_matchday_out_of_range(self, league):
        with pytest.raises(ValueError):
            CreateMatchRequest(league=league.id, matchday=39, home_team='A', away_team='B')

    def test_user_cannot_create(self, game, alice, league):
        with pytest.raises(AuthorizationError) as exc:
            game.create_match(
                alice,
                CreateMatchRequest(league=league.id, matchday=2, home_team='A', away_team='B'),
            )
        assert exc.value.role == 'user'

    def test_unknown_match(self, game):
        with pytest.raises(MatchNotFoundError) as exc:
            game.get_match('missing')
        assert 'missing' in str(exc.value)


class TestOfficialLineup:
    """Tests for recording the official starting eleven."""

    def test_lineup_confirms_match(self, game, admin, match, squads, make_lineup):
        updated = game.record_official_lineup(
            admin, match.id, 'home', make_lineup(squads['Liverpool'][:11])
        )
        assert updated.status == 'confirmed'
        assert [e.player for e in updated.lineups.home] == squads['Liverpool'][:11]
        assert all(e.from_minute == 0 for e in updated.lineups.home)
        assert updated.version == match.version + 1

    def test_lineup_accepts_plain_dicts(self, game, admin, match, squads):
        players = [
            {'player': pid, 'position': 'gk' if i == 0 else 'mid'}
            for i, pid in enumerate(squads['Arsenal'][:11])
        ]
        updated = game.record_official_lineup(admin, match.id, 'away', players)
        assert len(updated.lineups.away) == 11

    def test_squad_resolved_from_match_side(self, game, admin, match, squads, make_lineup):
        """Test an away lineup is checked against the away team's squad."""
        with pytest.raises(LineupValidationError) as exc:
            game.record_official_lineup(
                admin, match.id, 'away', make_lineup(squads['Liverpool'][:11])
            )
        assert exc.value.rule == 'squad_membership'
        assert 'Arsenal' in str(exc.value)
        assert game.get_match(match.id).status == 'draft'

    def test_invalid_lineup_leaves_match_untouched(self, game, admin, match, squads, make_lineup):
        with pytest.raises(LineupValidationError):
            game.record_official_lineup(
                admin, match.id, 'home', make_lineup(squads['Liverpool'][:10])
            )
        stored = game.get_match(match.id)
        assert stored.lineups.home == []
        assert stored.version == match.version

    def test_invalid_side(self, game, admin, match, squads, make_lineup):
        with pytest.raises(InvalidTeamError):
            game.record_official_lineup(
                admin, match.id, 'Liverpool', make_lineup(squads['Liverpool'][:11])
            )

    def test_missing_squad(self, game, admin, league, make_lineup):
        match = game.create_match(
            admin,
            CreateMatchRequest(league=league.id, matchday=3, home_team='Everton', away_team='Leeds'),
        )
        with pytest.raises(NotFoundError) as exc:
            game.record_official_lineup(admin, match.id, 'home', make_lineup(['x'] * 11))
        assert exc.value.key == 'Everton'

    def test_unknown_match(self, game, admin, squads, make_lineup):
        with pytest.raises(MatchNotFoundError):
            game.record_official_lineup(
                admin, 'missing', 'home', make_lineup(squads['Liverpool'][:11])
            )

    def test_lineup_can_be_corrected_while_confirmed(
        self, game, admin, match, squads, make_lineup
    ):
        game.record_official_lineup(admin, match.id, 'home', make_lineup(squads['Liverpool'][:11]))
        corrected = make_lineup(squads['Liverpool'][:10] + [squads['Liverpool'][12]])
        updated = game.record_official_lineup(admin, match.id, 'home', corrected)
        assert updated.status == 'confirmed'
        assert updated.lineups.home[-1].player == squads['Liverpool'][12]

    def test_user_cannot_record(self, game, alice, match, squads, make_lineup):
        with pytest.raises(AuthorizationError):
            game.record_official_lineup(
                alice, match.id, 'home', make_lineup(squads['Liverpool'][:11])
            )


class TestSubstitutions:
    """Tests for recording official substitutes."""

    def test_record_subs(self, game, admin, match, squads, make_subs):
        updated = game.record_substitutions(
            admin, match.id, 'home', make_subs(squads['Liverpool'][11:13], minute=70)
        )
        assert [s.player for s in updated.subs_in.home] == squads['Liverpool'][11:13]
        assert updated.subs_in.home[0].minute == 70
        assert updated.status == 'draft'

    def test_sub_outside_squad(self, game, admin, match, squads, make_subs):
        with pytest.raises(LineupValidationError) as exc:
            game.record_substitutions(admin, match.id, 'home', make_subs(squads['Arsenal'][:1]))
        assert exc.value.player_id == squads['Arsenal'][0]

    def test_too_many_subs(self, game, admin, match, squads, make_subs):
        with pytest.raises(LineupValidationError) as exc:
            game.record_substitutions(
                admin, match.id, 'away', make_subs(squads['Arsenal'][10:16])
            )
        assert exc.value.rule == 'subs_size'

    def test_subs_locked_after_finish(self, game, admin, match, squads, make_subs):
        finalize(game, admin, match)
        with pytest.raises(MatchLockedError):
            game.record_substitutions(admin, match.id, 'home', make_subs(squads['Liverpool'][11:12]))


class TestFinalizeMatch:
    """Tests for finishing a match."""

    def test_finalize_records_events(self, game, admin, match, squads):
        scorer = squads['Liverpool'][9]
        assister = squads['Liverpool'][10]
        away_scorer = squads['Arsenal'][8]
        finished = finalize(
            game,
            admin,
            match,
            score=MatchScore(home=2, away=1),
            goals=[
                Goal(scorer=scorer, assist=assister, minute=12),
                Goal(scorer=scorer, minute=55),
                Goal(scorer=away_scorer, minute=88),
            ],
            motm=scorer,
        )
        assert finished.status == 'finished'
        assert (finished.score.home, finished.score.away) == (2, 1)
        assert len(finished.events.goals) == 3
        assert finished.events.motm == scorer

    def test_draft_can_finish_directly(self, game, admin, match):
        assert finalize(game, admin, match).status == 'finished'

    def test_finalize_after_confirm(self, game, admin, match, squads, make_lineup):
        game.record_official_lineup(admin, match.id, 'home', make_lineup(squads['Liverpool'][:11]))
        assert finalize(game, admin, match).status == 'finished'

    def test_second_finalize_rejected(self, game, admin, match):
        finalize(game, admin, match, score=MatchScore(home=1, away=0))
        with pytest.raises(MatchLockedError):
            finalize(game, admin, match, score=MatchScore(home=5, away=0))
        assert game.get_match(match.id).score.home == 1

    def test_lineup_locked_after_finish(self, game, admin, match, squads, make_lineup):
        finalize(game, admin, match)
        with pytest.raises(MatchLockedError) as exc:
            game.record_official_lineup(
                admin, match.id, 'home', make_lineup(squads['Liverpool'][:11])
            )
        assert exc.value.status == 'finished'

    def test_unknown_motm(self, game, admin, match):
        with pytest.raises(LineupValidationError) as exc:
            finalize(game, admin, match, motm='stranger')
        assert exc.value.player_id == 'stranger'
        assert game.get_match(match.id).status == 'draft'

    def test_unknown_scorer(self, game, admin, match):
        with pytest.raises(LineupValidationError):
            finalize(game, admin, match, goals=[Goal(scorer='stranger')])

    def test_user_cannot_finalize(self, game, alice, match):
        with pytest.raises(AuthorizationError):
            finalize(game, alice, match)

    def test_official_writes_race_finalize(
        self, game, admin, league, squads, make_lineup, make_subs
    ):
        """Test a write racing finalization either lands before it or is locked out."""
        lineup = make_lineup(squads['Liverpool'][:11])
        subs = make_subs(squads['Liverpool'][11:13])

        for matchday in range(2, 12):
            match = game.create_match(
                admin,
                CreateMatchRequest(
                    league=league.id, matchday=matchday, home_team='Liverpool', away_team='Arsenal'
                ),
            )
            barrier = threading.Barrier(3)
            outcome = {}

            def attempt(name, write):
                barrier.wait()
                try:
                    write()
                    outcome[name] = 'saved'
                except MatchLockedError:
                    outcome[name] = 'locked'

            writes = {
                'finalize': lambda: finalize(game, admin, match),
                'lineup': lambda: game.record_official_lineup(admin, match.id, 'home', lineup),
                'subs': lambda: game.record_substitutions(admin, match.id, 'home', subs),
            }
            threads = [
                threading.Thread(target=attempt, args=(name, write))
                for name, write in writes.items()
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            assert outcome['finalize'] == 'saved'
            stored = game.get_match(match.id)
            assert stored.status == 'finished'
            if outcome['lineup'] == 'saved':
                assert [e.player for e in stored.lineups.home] == squads['Liverpool'][:11]
            else:
                assert stored.lineups.home == []
            if outcome['subs'] == 'saved':
                assert [s.player for s in stored.subs_in.home] == squads['Liverpool'][11:13]
            else:
                assert stored.subs_in.home == []


class TestStatusTransitions:
    """Tests for the forward-only status machine."""

    def _match(self, status):
        return Match(
            id='m1', league='l1', matchday=1, home_team='A', away_team='B', status=status
        )

    @pytest.mark.parametrize(
        'start,target',
        [
            ('draft', 'confirmed'),
            ('draft', 'finished'),
            ('confirmed', 'finished'),
        ],
    )
    def test_forward_transitions(self, start, target):
        assert advance_status(self._match(start), target).status == target

    @pytest.mark.parametrize(
        'start,target',
        [
            ('confirmed', 'draft'),
            ('finished', 'draft'),
            ('finished', 'confirmed'),
        ],
    )
    def test_backward_transitions_rejected(self, start, target):
        with pytest.raises(LifecycleError) as exc:
            advance_status(self._match(start), target)
        assert exc.value.status == start

    def test_same_status_is_noop(self):
        match = self._match('confirmed')
        assert advance_status(match, 'confirmed') is match

    def test_predictions_open_only_in_draft(self):
        assert_predictions_open(self._match('draft'))
        for status in ('confirmed', 'finished'):
            with pytest.raises(PredictionsClosedError):
                assert_predictions_open(self._match(status))

    def test_official_writable_until_finished(self):
        assert_official_writable(self._match('draft'))
        assert_official_writable(self._match('confirmed'))
        with pytest.raises(MatchLockedError):
            assert_official_writable(self._match('finished'))
