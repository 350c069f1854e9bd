# labosfs

This package builds the disk images used by a small teaching operating
system. It also includes pure-Python versions of the user-space helpers
that run on that system: a shell command parser, grep, wc, head, cat, echo,
xargs-style argument splitting, and a minimal scanf.

## Installing

    pip install .

To run the tests:

    pip install ".[test]"
    pytest

## Building disk images

### Inode filesystem (`labosfs.mkfs`)

This format describes a 128 MiB disk with 4 KiB blocks. The image starts at
disk block 32. Its layout is:

- a super block (block 32)
- a block bitmap (block 33)
- inode blocks (34 to 63)
- data blocks (64 onward)

Every file goes into the root directory. A file has 12 direct block
addresses and one indirect block. The root directory is created with the
entries `.` and `..`. A file name must be 1 to 27 bytes long.

From the command line:

    labosfs-mkfs user.img sh echo cat words.txt

This writes an image of the full image size. If a file is missing, a name is
invalid, or the image runs out of blocks or inodes, an error message is
printed and the exit status is 1.

From Python:

    from labosfs.mkfs import FsImage, FileType, build_image

    fs = FsImage()
    ino = fs.add_file("words.txt")     # returns the new inode number
    fs.list_root()                     # [DirEntry(inode=1, name='.'), DirEntry(inode=1, name='..'), ...]
    fs.read_file(ino)                  # the file's bytes
    fs.inode(ino)                      # Inode(kind=FileType.FILE, size=..., addrs=[...])
    fs.block(32)                       # one 4096-byte block: here the super block
    data = fs.to_bytes()               # the whole image

    build_image("user.img", ["sh", "echo"])

Lower-level operations are also available:

- `FsImage.balloc()` allocates a block.
- `FsImage.ialloc(kind)` allocates an inode.
- `FsImage.iwalk(ino, blk_no)` maps a file's block index to a disk block and
  allocates the block if it is absent.
- `FsImage.iappend(ino, data)` appends data to a file.

When the image is full, these raise `OSError` with `ENOSPC`. When a file grows
past 12 + 1024 blocks, they raise `ValueError("file too big")`.

### Flat file table (`labosfs.genuser`)

In this format, one 512-byte sector holds a table of `UserFile` records
(start sector, length, name). The contents of each file follow, each padded
to whole sectors. The first file starts at sector 257. The table holds at
most 16 entries, and a name may be at most 23 bytes.

    labosfs-genuser user.img prog1 prog2

    from labosfs.genuser import build_user_image, read_user_table, write_user_image

    image = build_user_image(["prog1", "prog2"])
    for entry in read_user_table(image):
        print(entry.name, entry.start_sect, entry.length, entry.sectors)

    write_user_image("user.img", ["prog1", "prog2"])

## Shell command parsing (`labosfs.shell`)

`tokenize(line)` splits a line into words and the operators
`| ( ) ; & < > >>`.

`parse_command(line)` builds a tree out of these classes:

- `ExecCmd(argv)`
- `RedirCmd(cmd, file, kind)`
- `PipeCmd(left, right)`
- `ListCmd(left, right)`
- `BackCmd(cmd)`

For example:

    from labosfs.shell import parse_command, cd_target, RedirKind

    cmd = parse_command("cat < in.txt | grep foo > out.txt; echo done &")

For a `RedirKind` (`INPUT`, `OUTPUT`, `APPEND`), these attributes describe
how the file is opened:

- `fd`, the descriptor it replaces
- `writable`
- `create`
- `truncate`
- `whence`

Malformed input raises `ShellSyntaxError`. This covers leftover tokens, a
missing `)`, a missing redirection file, and 10 or more arguments.

`cd_target("cd /tmp\n")` returns `"/tmp"`. For a line that is not a `cd `
command, it returns `None`.

## Text utilities (`labosfs.textutils`)

- `match(pattern, text)` is a regular-expression search that supports only
  `^ . * $`.
- `grep(pattern, lines)` yields the matching newline-terminated lines.
- `wc(stream)` returns a `WordCount(lines, words, chars)`.
  `WordCount.format(name)` renders the report line.
- `head(lines, n=10)` yields the first `n` lines.
- `cat(streams, out)` copies each stream to `out`.
- `echo(args)` returns the arguments joined by spaces, followed by a newline.
- `fmtname(path)` returns the last path component, blank-padded to 27
  characters.

## Argument splitting (`labosfs.xargs`)

`build_commands(text, base_argv)` returns one argument vector for each
non-empty input line. Each vector is `base_argv` extended by that line's
blank-separated words, as split by `parse_arg`.

An empty `base_argv` raises `ValueError`. An argument vector longer than 31
entries raises `TooManyArguments`.

## Input scanning (`labosfs.scan`)

`Scanner(stream)` reads a text stream in 256-character blocks. It provides:

- `getchar()`, which returns `""` at end of input.
- `getline(size)`, which reads at most `size - 1` characters and keeps the
  newline.
- `scanf(format)`, which understands `%c %s %d %u %x` and returns the
  converted values as a list.

## What this package does not do

The shell module only parses command lines. It does not run them, create
pipes, or redirect files. `build_commands` only produces argument vectors and
does not start any program. None of the text utilities open files by name:
they work on streams and lines that you pass in.