# tools/thread_dump_parser/tests/conftest.py
import pytest


@pytest.fixture
def single_thread_dump():
    """Smallest dump: one runnable thread, one frame, no locks."""
    return (
        '"Thread-1" nid=0x1\n'
        '   java.lang.Thread.State: RUNNABLE\n'
        '   at com.example.Foo.bar(Foo.java:10)\n'
    )


@pytest.fixture
def simple_thread_dump():
    """Healthy dump - no lock relationships at all."""
    return '''2024-01-15 10:30:45
Full thread dump OpenJDK 64-Bit Server VM (17.0.1+12 mixed mode):

"main" #1 prio=5 os_prio=0 tid=0x00007f1234567890 nid=0x1 runnable
   java.lang.Thread.State: RUNNABLE
	at com.example.Main.main(Main.java:10)

"GC Thread#0" #2 daemon prio=5 os_prio=0 tid=0x00007f1234567891 nid=0x2 runnable

"http-nio-8080-exec-1" #10 daemon prio=5 os_prio=0 tid=0x00007f1234567892 nid=0xa runnable
   java.lang.Thread.State: RUNNABLE
	at com.example.Controller.handle(Controller.java:50)

"http-nio-8080-exec-2" #11 daemon prio=5 os_prio=0 tid=0x00007f1234567893 nid=0xb runnable
   java.lang.Thread.State: RUNNABLE
	at com.example.Controller.handle(Controller.java:50)

"http-nio-8080-exec-3" #12 daemon prio=5 os_prio=0 cpu=1.20ms elapsed=310.55s tid=0x00007f1234567894 nid=0xc waiting on condition
   java.lang.Thread.State: TIMED_WAITING (parking)
	at jdk.internal.misc.Unsafe.park(java.base@17.0.1/Native Method)

   Locked ownable synchronizers:
	- None

JNI global refs: 30, weak refs: 0
'''


@pytest.fixture
def lock_thread_dump():
    """
    Dump exercising every lock relationship:
    - worker-1 holds a monitor and an ownable synchronizer
    - worker-2/worker-3 blocked on worker-1's monitor
    - consumer in Object.wait() (spurious "locked" after "waiting on")
    - parked on worker-1's ReentrantLock
    - timer waiting without a named lock (anonymous synchronizer)
    """
    return '''2024-01-15 10:30:45
Full thread dump OpenJDK 64-Bit Server VM (17.0.1+12 mixed mode):

"worker-1" #10 prio=5 os_prio=0 tid=0x00007f1234567890 nid=0xa runnable
   java.lang.Thread.State: RUNNABLE
	at com.example.Service.process(Service.java:50)
	- locked <0x00000000e1234567> (a java.lang.Object)
	at com.example.Service.run(Service.java:20)
	- eliminated <0x00000000e0000001> (a java.lang.StringBuffer)

   Locked ownable synchronizers:
	- <0x00000000f0000001> (a java.util.concurrent.locks.ReentrantLock$NonfairSync)

"worker-2" #11 prio=5 os_prio=0 tid=0x00007f1234567891 nid=0xb waiting for monitor entry
   java.lang.Thread.State: BLOCKED (on object monitor)
	at com.example.Service.process(Service.java:50)
	- waiting to lock <0x00000000e1234567> (a java.lang.Object)

   Locked ownable synchronizers:
	- None

"worker-3" #12 prio=5 os_prio=0 tid=0x00007f1234567892 nid=0xc waiting for monitor entry
   java.lang.Thread.State: BLOCKED (on object monitor)
	at com.example.Service.process(Service.java:50)
	- waiting to lock <0x00000000e1234567> (a java.lang.Object)

"consumer" #13 daemon prio=5 os_prio=0 tid=0x00007f1234567893 nid=0xd in Object.wait()
   java.lang.Thread.State: WAITING (on object monitor)
	at java.lang.Object.wait(Native Method)
	- waiting on <0x00000000e2222222> (a java.util.LinkedList)
	at java.lang.Object.wait(Object.java:502)
	at com.example.Queue.take(Queue.java:30)
	- locked <0x00000000e2222222> (a java.util.LinkedList)

"parked" #14 prio=5 os_prio=0 tid=0x00007f1234567894 nid=0xe waiting on condition
   java.lang.Thread.State: WAITING (parking)
	at sun.misc.Unsafe.park(Native Method)
	- parking to wait for  <0x00000000f0000001> (a java.util.concurrent.locks.ReentrantLock$NonfairSync)
	at java.util.concurrent.locks.LockSupport.park(LockSupport.java:175)

"timer" #15 daemon prio=5 os_prio=0 tid=0x00007f1234567895 nid=0xf in Object.wait()
   java.lang.Thread.State: TIMED_WAITING (on object monitor)
	at java.lang.Object.wait(Native Method)
	- waiting on <no object reference available>
	at java.util.TimerThread.mainLoop(Timer.java:552)
	- locked <0x00000000e3333333> (a java.util.TaskQueue)
	at java.util.TimerThread.run(Timer.java:505)

"VM Thread" os_prio=0 tid=0x00007f1234567896 nid=0x10 runnable

JNI global references: 42
'''


@pytest.fixture
def deadlock_thread_dump():
    """Two threads each holding the monitor the other wants, with the JVM's deadlock appendix."""
    return '''2024-01-15 10:30:45
Full thread dump OpenJDK 64-Bit Server VM (11.0.21+9 mixed mode):

"Thread-1" #10 prio=5 os_prio=0 tid=0x00007f1234567890 nid=0x1 waiting for monitor entry
   java.lang.Thread.State: BLOCKED (on object monitor)
	at com.example.DeadlockDemo.methodA(DeadlockDemo.java:20)
	- waiting to lock <0x00000000e1234567> (a java.lang.Object)
	- locked <0x00000000e7654321> (a java.lang.Object)

   Locked ownable synchronizers:
	- None

"Thread-2" #11 prio=5 os_prio=0 tid=0x00007f1234567891 nid=0x2 waiting for monitor entry
   java.lang.Thread.State: BLOCKED (on object monitor)
	at com.example.DeadlockDemo.methodB(DeadlockDemo.java:30)
	- waiting to lock <0x00000000e7654321> (a java.lang.Object)
	- locked <0x00000000e1234567> (a java.lang.Object)

   Locked ownable synchronizers:
	- None

JNI global references: 12


Found one Java-level deadlock:
=============================
"Thread-1":
  waiting to lock monitor 0x00007f11d8003f00 (object 0x00000000e1234567, a java.lang.Object),
  which is held by "Thread-2"
"Thread-2":
  waiting to lock monitor 0x00007f11d8006500 (object 0x00000000e7654321, a java.lang.Object),
  which is held by "Thread-1"

Java stack information for the threads listed above:
===================================================
"Thread-1":
	at com.example.DeadlockDemo.methodA(DeadlockDemo.java:20)
	- waiting to lock <0x00000000e1234567> (a java.lang.Object)
	- locked <0x00000000e7654321> (a java.lang.Object)
"Thread-2":
	at com.example.DeadlockDemo.methodB(DeadlockDemo.java:30)
	- waiting to lock <0x00000000e7654321> (a java.lang.Object)
	- locked <0x00000000e1234567> (a java.lang.Object)

Found 1 deadlock.
'''
